# -*- coding: utf-8 -*-
"""
CodeShare FastAPI 启动文件
--------------------------------
入口职责：
✅ 调用 create_app()
✅ 启动 uvicorn
"""

import uvicorn
from codeshare import create_app
from codeshare.config.settings_manager import get_current_settings

settings = get_current_settings()
app = create_app()

if __name__ == "__main__":
    uvicorn.run(
        "starter:app",
        host=settings.app.host,
        port=settings.app.port,
        reload=settings.app.debug,
    )
