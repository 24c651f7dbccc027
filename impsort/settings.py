"""
Environment overrides for impsort.

Loads from environment variables with the IMPSORT_ prefix, e.g.:
- IMPSORT_GROUPS: Group spec for non-static imports (e.g. "java.,javax.,org.")
- IMPSORT_STATIC_GROUPS: Group spec for static imports
- IMPSORT_REMOVE_UNUSED: Remove imports whose name never appears (true/false)
- IMPSORT_LINE_ENDING: AUTO, KEEP, LF, CRLF or CR
- IMPSORT_SKIP: Skip execution entirely
- IMPSORT_JOBS: Number of worker threads (0 = auto)

Unset variables leave the file or default value in place.
"""

from typing import Any, Dict, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class EnvSettings(BaseSettings):
    """Options that may be overridden from the environment."""

    model_config = SettingsConfigDict(
        env_prefix="IMPSORT_",
        extra="ignore",
    )

    source_encoding: Optional[str] = None
    groups: Optional[str] = None
    static_groups: Optional[str] = None
    static_after: Optional[bool] = None
    join_static_with_non_static: Optional[bool] = None
    remove_unused: Optional[bool] = None
    treat_same_package_as_unused: Optional[bool] = None
    breadth_first_comparator: Optional[bool] = None
    line_ending: Optional[str] = None
    compliance: Optional[str] = None
    skip: Optional[bool] = None
    cache_dir: Optional[str] = None
    jobs: Optional[int] = None

    def overrides(self) -> Dict[str, Any]:
        """The options actually set in the environment."""
        return self.model_dump(exclude_none=True)
