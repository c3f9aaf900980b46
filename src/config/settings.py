"""
Application settings and configuration

Uses pydantic-settings for type-safe configuration via environment variables.
All settings use DECKLS_ prefix (e.g., DECKLS_DEBOUNCE_MS=500).

Settings can also be loaded from a .env file in the project root.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """
    Application configuration via environment variables.

    Environment variables use DECKLS_ prefix.

    Examples:
        DECKLS_DEBOUNCE_MS=500
        DECKLS_DIAGNOSTIC_SOURCE="My Talk"
        DECKLS_STRICT_MODE=true
    """

    model_config = SettingsConfigDict(
        env_prefix="DECKLS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Analysis configuration
    sequence_type: str = Field(
        default="sequence",
        description="Action type whose 'steps' list holds nested step declarations",
    )

    diagnostic_source: str = Field(
        default="Executable Talk",
        description="Value of the 'source' field on every published diagnostic",
    )

    typo_distance_max: int = Field(
        default=2,
        description="Largest edit distance for which a typo correction is offered",
    )

    # Server configuration
    debounce_ms: int = Field(
        default=300,
        description="Delay between the last edit and the diagnostic pass, per document",
    )

    client_request_timeout: float = Field(
        default=5.0,
        description="Seconds to wait for the client to answer workspace index requests",
    )

    # Batch linter configuration
    deck_pattern: str = Field(
        default="**/*.deck.md",
        description="Glob (relative to inputdir) selecting the decks to lint",
    )

    report_filename: str = Field(
        default="diagnostics.json",
        description="Name of the JSON report written to the output directory",
    )

    strict_mode: bool = Field(
        default=False,
        description="Strict mode: treat warnings as errors",
    )

    def trustWarning_make(self, description: str) -> str:
        """
        Prefix an action description with the workspace trust warning.

        Args:
            description: Plain action description from the catalog

        Returns:
            Markdown string announcing that the action needs workspace trust

        Example:
            >>> settings = AppSettings()
            >>> settings.trustWarning_make("Runs a command.")
            '⚠️ Requires Workspace Trust\\n\\nRuns a command.'
        """
        return f"⚠️ Requires Workspace Trust\n\n{description}"


# Singleton instance - import this in your code
appsettings = AppSettings()
