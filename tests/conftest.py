"""
Pytest configuration and shared fixtures for all tests.
"""
import logging
import random
from pathlib import Path

import pytest


def build_tree(root: Path, seed: int = 7, depth: int = 3, files: int = 4, dirs: int = 3):
    """
    Fill root with a random tree of small text files and some empty directories.

    Returns:
        List of every file created
    """
    rng = random.Random(seed)
    file_paths = []
    levels = [root]

    for i in range(depth):
        next_level = []
        for path in levels:
            for j in range(files):
                file_path = path / f"test_{i}_{j}.txt"
                file_path.write_text(f"test file for {i}_{j} in {path.name}")
                file_paths.append(file_path)

            for j in range(dirs):
                sub_dir = path / f"test_dir_{i}_{j}"
                sub_dir.mkdir()
                # Some directories stay empty
                if rng.random() < 0.6:
                    next_level.append(sub_dir)

        if not next_level:
            next_level.append(rng.choice(levels))
        levels = next_level

    return file_paths


@pytest.fixture
def source_tree(tmp_path):
    """A populated source directory and the list of its files."""
    root = tmp_path / "from"
    root.mkdir()
    return root, build_tree(root)


@pytest.fixture
def destination_dir(tmp_path):
    root = tmp_path / "to"
    root.mkdir()
    return root


@pytest.fixture(autouse=True)
def restore_logging():
    """Undo handler and level changes made by setup_logging."""
    root = logging.getLogger()
    app = logging.getLogger("schedule_copy")
    handlers, level, app_level = list(root.handlers), root.level, app.level
    yield
    for handler in list(root.handlers):
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)
    app.setLevel(app_level)
