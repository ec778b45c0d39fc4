"""
clothtool
Clothing addon project intake and portability

Contents:
- meta_validator: .meta descriptor validation
- identity: short names and suggested project name
- drawables: .ydd drawable matching
- archiver / obfuscation: .gctproject pack and unpack
- intake: open / add / import / export workflow
"""

from .errors import (
    ClothToolError,
    ArchiveError,
    CorruptArchiveError,
    StagingError,
)

from .meta_validator import (
    validate,
    validate_async,
    filter_valid,
    filter_valid_async,
)

from .identity import (
    AddonIdentity,
    ProjectIdentitySuggestion,
    extract_short_name,
    suggest_project_name,
)

from .drawables import (
    count_drawables,
    count_drawables_async,
    find_drawables,
)

from .archiver import (
    ProjectArchiver,
    export_project,
    import_project,
)

from .project import (
    Addon,
    AddonManager,
    ProjectState,
)

from .setup_decision import (
    ProjectSetupDecision,
    ProjectSetupRequest,
    AutoConfirmer,
)

from .intake import (
    IntakePhase,
    IntakeStatus,
    IntakeOutcome,
    ProjectIntakeWorkflow,
)

__version__ = "0.1.0"

__all__ = [
    # Errors
    'ClothToolError',
    'ArchiveError',
    'CorruptArchiveError',
    'StagingError',
    # Validation
    'validate',
    'validate_async',
    'filter_valid',
    'filter_valid_async',
    # Identity
    'AddonIdentity',
    'ProjectIdentitySuggestion',
    'extract_short_name',
    'suggest_project_name',
    # Drawables
    'count_drawables',
    'count_drawables_async',
    'find_drawables',
    # Archive
    'ProjectArchiver',
    'export_project',
    'import_project',
    # Project
    'Addon',
    'AddonManager',
    'ProjectState',
    # Setup
    'ProjectSetupDecision',
    'ProjectSetupRequest',
    'AutoConfirmer',
    # Intake
    'IntakePhase',
    'IntakeStatus',
    'IntakeOutcome',
    'ProjectIntakeWorkflow',
]
