from __future__ import annotations

import sys
import unittest
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]


@unittest.skipIf(sys.version_info < (3, 11), "tomllib requires Python 3.11")
class PackagingTests(unittest.TestCase):
    def test_package_find_lists_exactly_the_source_packages(self) -> None:
        import tomllib

        config = tomllib.loads((REPO_ROOT / "pyproject.toml").read_text(encoding="utf-8"))
        include = config["tool"]["setuptools"]["packages"]["find"]["include"]

        top_level = sorted(p.name for p in (REPO_ROOT / "src").iterdir() if p.is_dir() and p.name.isidentifier() and not p.name.startswith("_"))
        self.assertEqual(sorted(pattern.rstrip("*") for pattern in include), top_level)


if __name__ == "__main__":
    unittest.main()
