"""Pytest 配置和 fixtures。"""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

# 项目根目录
PROJECT_ROOT = Path(__file__).parent.parent

# 未安装时也能导入 src 下的包
SRC_DIR = PROJECT_ROOT / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

FIXTURES_DIR = Path(__file__).parent / "fixtures"

from shellrun import ProcessRunner  # noqa: E402


@pytest.fixture
def temp_workspace(tmp_path: Path) -> Path:
    """创建临时工作目录。"""
    workspace = tmp_path / "workspace"
    workspace.mkdir()
    return workspace


@pytest.fixture
def runner() -> ProcessRunner:
    """清理超时较短的 ProcessRunner（用于测试）。"""
    return ProcessRunner(term_timeout=0.5, kill_timeout=0.3)


@pytest.fixture
def noisy_child() -> Path:
    """向 stdout 和 stderr 写入可配置输出的脚本。"""
    return FIXTURES_DIR / "noisy_child.py"
