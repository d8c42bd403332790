"""TypeScript file discovery and parsing."""

import fnmatch
import logging
from pathlib import Path
from typing import List, Optional

from ts_validator.errors import ParseError
from ts_validator.parsers.typescript import ParsedModule, TypeScriptParser
from ts_validator.scanners.base import BaseScanner

logger = logging.getLogger(__name__)


class TypeScriptScanner(BaseScanner):
    """
    Finds ``.ts`` / ``.tsx`` files and parses them.

    Files that cannot be read or parsed are logged and skipped; the rest of
    the scan continues.
    """

    name = "TypeScript Scanner"

    EXTENSIONS = {".ts", ".tsx"}

    SKIP_DIRS = {'.git', 'node_modules', 'dist', 'build', 'coverage',
                 '.next', '.turbo', 'out'}

    def __init__(
        self,
        exclude_patterns: Optional[List[str]] = None,
        parser: Optional[TypeScriptParser] = None
    ):
        """
        Initialize the scanner.

        Args:
            exclude_patterns: Glob patterns to exclude from scanning (e.g., "tests/**")
            parser: Parser to use; a new one is created when omitted
        """
        self.exclude_patterns = exclude_patterns or []
        self.parser = parser or TypeScriptParser()
        self.skipped = 0

    def scan(self, path: Path) -> List[ParsedModule]:
        """
        Scan a path for TypeScript files and parse them.

        Args:
            path: File or directory to scan

        Returns:
            Parsed modules, ordered by path
        """
        modules = []
        for ts_file in self.find_files(path):
            parsed = self._parse_file(ts_file)
            if parsed is not None:
                modules.append(parsed)
        return modules

    def find_files(self, path: Path) -> List[Path]:
        """Find all TypeScript files to scan."""
        if path.is_file():
            return [path] if self._is_source_file(path) else []

        ts_files = []
        for candidate in sorted(path.rglob('*')):
            if not candidate.is_file() or not self._is_source_file(candidate):
                continue

            rel_path = candidate.relative_to(path)

            if any(part in self.SKIP_DIRS for part in rel_path.parts):
                continue

            # Skip hidden directories
            if any(part.startswith('.') for part in rel_path.parts[:-1]):
                continue

            if self._should_exclude(rel_path.as_posix()):
                continue

            ts_files.append(candidate)

        return ts_files

    def _is_source_file(self, path: Path) -> bool:
        return path.suffix in self.EXTENSIONS and not path.name.endswith('.d.ts')

    def _should_exclude(self, rel_path: str) -> bool:
        """Check if a relative path matches any exclude pattern."""
        for pattern in self.exclude_patterns:
            normalized_pattern = pattern.replace('\\', '/')

            if fnmatch.fnmatch(rel_path, normalized_pattern):
                return True

            # "tests/**" matches everything below tests/
            if normalized_pattern.endswith('/**'):
                prefix = normalized_pattern[:-3]
                if rel_path.startswith(prefix + '/') or rel_path == prefix:
                    return True

            # "**/*.spec.ts" matches the file name or any path segment
            if normalized_pattern.startswith('**/'):
                suffix_pattern = normalized_pattern[3:]
                if any(fnmatch.fnmatch(part, suffix_pattern) for part in Path(rel_path).parts):
                    return True

        return False

    def _parse_file(self, file_path: Path) -> Optional[ParsedModule]:
        """Parse a single file, returning None when it has to be skipped."""
        try:
            return self.parser.parse_file(file_path)
        except ParseError as e:
            logger.warning(f"Failed to parse {file_path}: {e}")
        except UnicodeDecodeError as e:
            logger.warning(f"Encoding error in {file_path}: {e}")
        except OSError as e:
            logger.warning(f"Failed to read {file_path}: {e}")
        except RecursionError:
            logger.warning(f"Skipping {file_path}: syntax tree is nested too deeply")
        self.skipped += 1
        return None
