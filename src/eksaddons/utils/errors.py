"""Custom exception classes for eks-addons."""


class AddonsError(Exception):
    """Base exception for eks-addons errors."""

    pass


class ConfigurationError(AddonsError):
    """Raised when configuration is invalid or missing."""

    pass


class ConfigFileNotFoundError(ConfigurationError):
    """Raised when an addon configuration file cannot be found."""

    pass


class InvalidConfigError(ConfigurationError):
    """Raised when an addon configuration file is invalid or malformed."""

    pass


class KubectlCommandError(AddonsError):
    """Raised when a kubectl CLI command fails."""

    pass


class ResourceNotFoundError(KubectlCommandError):
    """Raised when a Kubernetes resource is not found."""

    pass


class ResourceConflictError(KubectlCommandError):
    """Raised when an update is rejected because the resource changed since it was read."""

    pass


class WorkloadIntegrityError(AddonsError):
    """Raised when a workload is missing data it is required to carry."""

    pass


class ImageFormatError(AddonsError):
    """Raised when a container image reference is not in repository:tag form."""

    pass


class VersionComparisonError(AddonsError):
    """Raised when a version string cannot be parsed for comparison."""

    pass
