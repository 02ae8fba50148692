"""Core domain types: results, exit codes, config and project detection."""

from .config import Config, ConfigError, load_config
from .errors import ErrorCode
from .project import Project, ProjectError, detect_project
from .result import Err, Ok, Result

__all__ = [
    # config
    "Config",
    "ConfigError",
    "load_config",
    # errors
    "ErrorCode",
    # project
    "Project",
    "ProjectError",
    "detect_project",
    # result
    "Err",
    "Ok",
    "Result",
]
