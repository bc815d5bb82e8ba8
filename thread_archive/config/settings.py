"""Configuration handling for the thread archive generator."""

import os
from dataclasses import dataclass, field, fields
from typing import Any, Dict, List, Optional

import yaml
from dotenv import load_dotenv
from pydantic import ValidationError

from thread_archive.core.input_format import DecodeOptions, InputFormat, resolve_input_format
from thread_archive.core.live_adapter import DEFAULT_PUSHSHIFT_FRONTEND
from thread_archive.errors import UnsupportedInputFormatError
from thread_archive.models.canonical import Preferences


@dataclass
class SiteConfig:
    """Metadata for the generated site's index."""

    title: str = "Archive"
    description: str = ""


@dataclass
class Config:
    """Application configuration combining environment variables and YAML config."""

    source: str = ""
    output: str = "out"
    input_format: str = InputFormat.BDFR_SELF_POST.value
    pushshift_frontend: str = DEFAULT_PUSHSHIFT_FRONTEND
    static_dir: Optional[str] = None
    log_level: str = "INFO"
    log_file: Optional[str] = None
    site: SiteConfig = field(default_factory=SiteConfig)
    preferences: Preferences = field(default_factory=Preferences)
    # Problems found while loading, reported by validate()
    load_errors: List[str] = field(default_factory=list, repr=False)

    @classmethod
    def from_files(cls, config_path: Optional[str] = None, env_path: Optional[str] = None) -> "Config":
        """
        Load configuration from environment variables and an optional YAML file.

        YAML values override environment values.

        Args:
            config_path: Path to YAML configuration file (skipped if missing)
            env_path: Optional path to .env file (defaults to .env in current directory)

        Returns:
            Config instance with merged configuration
        """
        if env_path:
            load_dotenv(env_path)
        else:
            load_dotenv()

        config = cls()
        config.source = os.getenv("THREAD_ARCHIVE_SOURCE", config.source)
        config.output = os.getenv("THREAD_ARCHIVE_OUTPUT", config.output)
        config.input_format = os.getenv("THREAD_ARCHIVE_INPUT_FORMAT", config.input_format)
        config.pushshift_frontend = os.getenv("THREAD_ARCHIVE_PUSHSHIFT_FRONTEND", config.pushshift_frontend)
        config.log_level = os.getenv("THREAD_ARCHIVE_LOG_LEVEL", config.log_level)

        if config_path and os.path.exists(config_path):
            with open(config_path, "r", encoding="utf-8") as file:
                yaml_config = yaml.safe_load(file)

            if yaml_config:
                config.apply(yaml_config)

        return config

    def apply(self, values: Dict[str, Any]) -> None:
        """Merge a mapping (e.g. parsed YAML) into this configuration. Unknown keys are ignored."""
        names = {f.name for f in fields(self)} - {"load_errors"}
        for key, value in values.items():
            if key in ("site", "preferences"):
                continue
            if key in names:
                setattr(self, key, value)

        if isinstance(values.get("site"), dict):
            site = SiteConfig()
            for key, value in values["site"].items():
                if hasattr(site, key):
                    setattr(site, key, value)
            self.site = site

        if isinstance(values.get("preferences"), dict):
            known = {k: v for k, v in values["preferences"].items() if k in Preferences.model_fields}
            try:
                self.preferences = Preferences(**known)
            except ValidationError as e:
                invalid = ", ".join(str(error["loc"][0]) for error in e.errors() if error["loc"])
                self.load_errors.append(f"Invalid preferences ({invalid}); using defaults")

    @property
    def filters(self) -> frozenset:
        return frozenset(self.preferences.filters)

    def decode_options(self) -> DecodeOptions:
        return DecodeOptions(
            filters=self.filters,
            prefs=self.preferences,
            pushshift_frontend=self.pushshift_frontend,
        )

    def validate(self, require_source: bool = False) -> List[str]:
        """
        Validate configuration and return a list of validation errors.

        Args:
            require_source: Whether a source directory must be configured

        Returns:
            List of validation error messages (empty if valid)
        """
        errors = list(self.load_errors)

        try:
            resolve_input_format(self.input_format)
        except UnsupportedInputFormatError as e:
            errors.append(str(e))

        if not self.pushshift_frontend:
            errors.append("pushshift_frontend must not be empty")

        if not self.output:
            errors.append("output directory must be specified")

        if require_source:
            if not self.source:
                errors.append("Missing source directory (THREAD_ARCHIVE_SOURCE or --source)")
            elif not os.path.isdir(self.source):
                errors.append(f"Source directory does not exist: {self.source}")

        if self.static_dir and not os.path.isdir(self.static_dir):
            errors.append(f"static_dir does not exist: {self.static_dir}")

        return errors
