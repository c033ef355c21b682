"""Course file schema and loader."""

from asgn.config.loader import (
    ConfigLoadError,
    course_file_path,
    load_course_config,
    write_course_config,
)
from asgn.config.schema import (
    ConfigValidationError,
    ConfigValidationIssue,
    CourseConfig,
    default_config,
    validate_config,
)

__all__ = [
    "ConfigLoadError",
    "ConfigValidationError",
    "ConfigValidationIssue",
    "CourseConfig",
    "course_file_path",
    "default_config",
    "load_course_config",
    "validate_config",
    "write_course_config",
]
