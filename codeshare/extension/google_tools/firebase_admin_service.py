"""
# @Time    : 2026/10/19
# @Author  : Pedro
# @File    : firebase_admin_service.py
# @Software: PyCharm
"""
import firebase_admin
from firebase_admin import credentials
from loguru import logger

from codeshare.config.settings_manager import get_current_settings


# ✅ Firebase Admin 初始化（仅执行一次，按需调用）
def init_firebase_admin() -> firebase_admin.App:
    try:
        return firebase_admin.get_app()
    except ValueError:
        pass

    settings = get_current_settings()
    firebase = settings.google.firebase

    if firebase.service_account_path:
        cred = credentials.Certificate(firebase.service_account_path)
    else:
        # 未配置服务账号 → 使用 GOOGLE_APPLICATION_CREDENTIALS / GCE 默认凭据
        cred = credentials.ApplicationDefault()

    options = {"projectId": firebase.project_id} if firebase.project_id else None
    app = firebase_admin.initialize_app(cred, options)
    logger.info(f"✅ Firebase Admin SDK 已初始化 project={firebase.project_id or '-'}")
    return app
