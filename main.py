#!/usr/bin/env python3
"""程序入口点：dmenu 启动器"""

import sys
from pathlib import Path

# 添加项目根目录到 Python 路径
ROOT = Path(__file__).resolve().parents[0]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from dmm.launcher import main  # noqa: E402

if __name__ == "__main__":
    sys.exit(main())
