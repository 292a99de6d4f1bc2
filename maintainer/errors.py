"""Exceptions raised by the maintainer engine."""


class MaintainerError(Exception):
    """Base class for all maintainer errors."""


class ResolutionError(MaintainerError):
    """A reference could not be resolved to a commit SHA."""


class InvalidRepositoryError(MaintainerError, ValueError):
    """A repository identifier is not in owner/repo form."""


class InvalidPatchRuleError(MaintainerError, ValueError):
    """A patch catalog entry is malformed."""


class ConfigBlockError(MaintainerError, TypeError):
    """A configuration block cannot be converted to a string-keyed map."""


class RulesFileError(MaintainerError):
    """A custom rules file could not be loaded or failed validation."""
