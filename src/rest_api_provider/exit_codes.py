"""Numeric process exit codes used by the ``rest-api-provider`` CLI.

Each constant maps to an error category and is referenced by the
corresponding :class:`~rest_api_provider.exceptions.RestApiProviderError`
subclass, so shell wrappers can tell failures apart without parsing stderr.
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments."""

EXIT_DECLARATION_ERROR = 3
"""A resource declaration used an unsupported field or relation type."""

EXIT_API_ERROR = 5
"""The remote API answered outside ``[100, 400)`` or could not be reached."""
