"""
CodeShare Settings Manager (Safe Lazy Import)
--------------------------------
✅ 支持全局单例访问
✅ 彻底避免 config ↔ core 循环导入
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from codeshare.core.config import Settings


def get_current_settings() -> "Settings":
    """从任意模块安全地获取当前 settings 实例。"""
    # ✅ 延迟导入，防止循环
    from codeshare.core.config import get_current_settings as _get
    return _get()
