"""
Configuration and ignore rule management.

Handles:
- Loading .ts-validator.yaml configuration
- Kind-level and path-level ignore rules
- Baseline scanning support
"""

import fnmatch
import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, List, Optional, Set, Tuple

import yaml

from ts_validator.models.violation import Violation

logger = logging.getLogger(__name__)


@dataclass
class IgnoreRule:
    """Single ignore rule definition."""
    kind: Optional[str] = None                      # "DirectAccess", "TSV-001" or "*"
    paths: List[str] = field(default_factory=list)  # Glob path patterns
    reason: str = ""

    def matches_kind(self, violation: Violation) -> bool:
        if not self.kind or self.kind == "*":
            return True
        return self.kind in (violation.kind.value, violation.rule_id)


@dataclass
class ScanConfig:
    """Scan configuration."""
    exclude: List[str] = field(default_factory=list)
    rules: Optional[str] = None
    fail_on_warning: bool = False


@dataclass
class ValidatorConfig:
    """Top-level configuration file contents."""
    ignore_rules: List[IgnoreRule] = field(default_factory=list)
    scan: ScanConfig = field(default_factory=ScanConfig)


@dataclass(frozen=True)
class Suppression:
    """A violation hidden by an ignore rule."""
    violation: Violation
    reason: str


class IgnoreManager:
    """
    Manager for ignore rules and scan configuration.

    Loads configuration from .ts-validator.yaml and decides which
    violations are suppressed.
    """

    CONFIG_FILENAMES = ['.ts-validator.yaml', '.ts-validator.yml', 'ts-validator.yaml']

    def __init__(self):
        self.config: Optional[ValidatorConfig] = None
        self._loaded_from: Optional[Path] = None
        self._base_path: Optional[Path] = None

    @property
    def loaded_from(self) -> Optional[Path]:
        return self._loaded_from

    def load(self, project_path: Path) -> bool:
        """
        Load configuration for a scan target.

        Searches for config in:
        1. The scan target directory (its parent when the target is a file)
        2. Current working directory (if different)
        3. Parent directories up to filesystem root

        Args:
            project_path: File or directory being scanned

        Returns:
            True if configuration was loaded successfully
        """
        project_path = project_path.resolve()
        if project_path.is_file():
            project_path = project_path.parent
        cwd = Path.cwd().resolve()

        search_paths: List[Path] = [project_path]
        if cwd != project_path:
            search_paths.append(cwd)

        parent = project_path.parent
        while parent != parent.parent:
            if parent not in search_paths:
                search_paths.append(parent)
            parent = parent.parent

        for search_path in search_paths:
            for filename in self.CONFIG_FILENAMES:
                config_path = search_path / filename
                if config_path.exists():
                    self._base_path = project_path
                    return self._load_file(config_path)

        return False

    def _load_file(self, path: Path) -> bool:
        """Load configuration from a specific file."""
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f)

            if not data:
                return False
            if not isinstance(data, dict):
                logger.warning(f"Ignoring {path}: expected a mapping at the top level")
                return False

            ignore_rules = []
            for rule_data in data.get('ignore') or []:
                rule = IgnoreRule(
                    kind=rule_data.get('kind') or rule_data.get('rule_id'),
                    paths=rule_data.get('paths') or [],
                    reason=rule_data.get('reason', '')
                )
                ignore_rules.append(rule)

            # Handle None value from YAML
            scan_data = data.get('scan') or {}
            scan_config = ScanConfig(
                exclude=scan_data.get('exclude') or [],
                rules=scan_data.get('rules'),
                fail_on_warning=bool(scan_data.get('fail_on_warning', False))
            )

            self.config = ValidatorConfig(ignore_rules=ignore_rules, scan=scan_config)
            self._loaded_from = path
            logger.debug(f"Loaded config from {path}")
            return True

        except yaml.YAMLError as e:
            logger.warning(f"Failed to parse {path}: {e}")
            return False
        except (OSError, AttributeError, TypeError) as e:
            logger.warning(f"Error loading {path}: {e}")
            return False

    def get_exclude_patterns(self) -> List[str]:
        """Get the list of exclude patterns from scan config."""
        if self.config and self.config.scan:
            return self.config.scan.exclude
        return []

    def get_rules(self) -> Optional[str]:
        """Rule set name from scan config, if any."""
        if self.config:
            return self.config.scan.rules
        return None

    def fail_on_warning(self) -> bool:
        return bool(self.config and self.config.scan.fail_on_warning)

    def should_ignore(self, violation: Violation) -> Optional[str]:
        """
        Check if a violation should be ignored.

        Returns:
            Ignore reason if it should be ignored, None otherwise
        """
        if not self.config:
            return None

        rel_path = self._get_relative_path(violation.file)

        for ignore in self.config.ignore_rules:
            if not ignore.matches_kind(violation):
                continue

            if ignore.paths and not self._match_any_pattern(rel_path, ignore.paths):
                continue

            return ignore.reason or f"Suppressed by config ({self._loaded_from})"

        return None

    def partition(self, violations: Iterable[Violation]) -> Tuple[List[Violation], List[Suppression]]:
        """Split violations into reported ones and suppressed ones, keeping order."""
        reported: List[Violation] = []
        suppressed: List[Suppression] = []
        for violation in violations:
            reason = self.should_ignore(violation)
            if reason:
                suppressed.append(Suppression(violation, reason))
            else:
                reported.append(violation)
        return reported, suppressed

    def _get_relative_path(self, file_path: str) -> str:
        """
        Convert a file path to a relative path for pattern matching.

        If the file_path is within the base_path, returns the relative
        portion. Otherwise returns the original path.
        """
        if not self._base_path:
            return file_path
        try:
            return Path(file_path).resolve().relative_to(self._base_path).as_posix()
        except ValueError:
            return file_path

    def _match_any_pattern(self, path: str, patterns: List[str]) -> bool:
        """Check if a path matches any of the given glob patterns."""
        normalized_path = path.replace('\\', '/')

        for pattern in patterns:
            normalized_pattern = pattern.replace('\\', '/')

            if fnmatch.fnmatch(normalized_path, normalized_pattern):
                return True

            if normalized_pattern.endswith('/**'):
                prefix = normalized_pattern[:-3]
                if normalized_path.startswith(prefix + '/') or normalized_path == prefix:
                    return True

            if normalized_pattern.startswith('**/'):
                suffix_pattern = normalized_pattern[3:]
                for part in Path(normalized_path).parts:
                    if fnmatch.fnmatch(part, suffix_pattern):
                        return True

        return False


# Baseline scanning support

def save_baseline(violations: List[Violation], output_path: Path):
    """
    Save violations as a baseline file.

    Args:
        violations: Violations to record
        output_path: Path to save the baseline file
    """
    baseline = {
        "version": "1.0",
        "created_at": datetime.now(timezone.utc).isoformat(),
        "fingerprints": [v.fingerprint() for v in violations]
    }
    output_path.write_text(json.dumps(baseline, indent=2), encoding="utf-8")


def load_baseline(baseline_path: Path) -> Set[str]:
    """
    Load fingerprints from a baseline file.

    Returns:
        Set of fingerprints, empty when the file cannot be read
    """
    try:
        data = json.loads(baseline_path.read_text(encoding="utf-8"))
        return set(data.get("fingerprints", []))
    except (OSError, ValueError, AttributeError) as e:
        logger.warning(f"Failed to load baseline from {baseline_path}: {e}")
        return set()


def filter_by_baseline(violations: List[Violation], baseline: Set[str]) -> List[Violation]:
    """Keep only violations whose fingerprint is not in the baseline."""
    return [v for v in violations if v.fingerprint() not in baseline]


def create_default_config() -> str:
    """
    Create a default .ts-validator.yaml configuration template.

    Returns:
        YAML string with default configuration
    """
    return '''# ts-validator configuration

# Scan settings
scan:
  exclude:
    - "node_modules/**"
    - "dist/**"
    - "**/*.spec.ts"
  # Validation rule set: zod-strict, zod-lenient or custom
  rules: zod-strict
  # Exit with code 1 when violations are found
  fail_on_warning: false

# Ignore rules
ignore:
  # Example: Ignore alias warnings in legacy routes
  # - kind: Alias
  #   paths:
  #     - "src/legacy/**"
  #   reason: "Legacy routes are validated by middleware"
'''
