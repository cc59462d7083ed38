# -*- coding: utf-8 -*-
"""
@Time    : 2026/10/19
@Author  : Pedro
@File    : config.py
@Software: PyCharm

CodeShare Config System
---------------------------------------------------
✅ 自动加载根目录 .env
✅ YAML 支持 ${ENV_VAR} 占位符解析
✅ 自动根据 APP_ENV 加载 dev.yaml / production.yaml
✅ 深度递归合并配置（不会丢失默认值）
✅ 线程安全单例 + FastAPI 注册
"""

import os
import re
import threading
from functools import lru_cache
from typing import Optional, Any, Dict, List

import yaml
from dotenv import load_dotenv
from fastapi import FastAPI
from loguru import logger
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# ======================================================
# 🔧 加载 .env 文件
# ======================================================
BASE_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), "../../"))
ENV_PATH = os.path.join(BASE_DIR, ".env")
if os.path.exists(ENV_PATH):
    load_dotenv(ENV_PATH, override=True)


# ======================================================
# 🧩 内置基础配置模型
# ======================================================
class AppConfig(BaseModel):
    name: str = "CodeShare"
    version: str = "0.1.0"
    env: str = "dev"
    debug: bool = True
    log_level: str = "DEBUG"
    log_path: Optional[str] = "logs/app_{time:YYYY-MM-DD}.log"
    host: str = "127.0.0.1"
    port: int = 8080


class FirebaseConfig(BaseModel):
    api_key: Optional[str] = None
    project_id: Optional[str] = None
    auth_domain: Optional[str] = None
    service_account_path: Optional[str] = None
    identity_url: str = "https://identitytoolkit.googleapis.com/v1"
    timeout: float = 10.0


class GoogleConfig(BaseModel):
    firebase: FirebaseConfig = FirebaseConfig()


class StoreConfig(BaseModel):
    # firestore | memory
    backend: str = "memory"


class IdentityConfig(BaseModel):
    # firebase | local
    backend: str = "local"


class CodeShareConfig(BaseModel):
    publish_cost: int = 5
    ad_reward: int = 10
    ad_delay_seconds: float = 3.0
    coins: List[str] = Field(default_factory=lambda: ["USDT", "BTC", "ETH", "BNB", "SOL", "DOGE", "TON", "OTHER"])
    enforce_max_claims: bool = True
    sweep_interval_seconds: int = 3600
    sweep_without_admin: bool = False
    admin_session_ttl_seconds: int = 3600


class AdminConfig(BaseModel):
    emails: List[str] = Field(default_factory=list)


# ======================================================
# 🧠 工具函数
# ======================================================
def deep_merge(base: dict, override: dict) -> dict:
    """递归合并字典"""
    result = base.copy()
    for k, v in override.items():
        if isinstance(v, dict) and isinstance(result.get(k), dict):
            result[k] = deep_merge(result[k], v)
        else:
            result[k] = v
    return result


def substitute_env_vars(value: Any) -> Any:
    """解析 ${VAR} 变量"""
    if isinstance(value, str):
        for var in re.findall(r"\$\{([^}^{]+)\}", value):
            env_val = os.getenv(var)
            if env_val:
                value = value.replace(f"${{{var}}}", env_val)
    elif isinstance(value, dict):
        return {k: substitute_env_vars(v) for k, v in value.items()}
    elif isinstance(value, list):
        return [substitute_env_vars(v) for v in value]
    return value


def load_yaml_config(env: str) -> Dict[str, Any]:
    """加载 YAML 配置文件并解析环境变量"""
    config_dir = os.path.abspath(os.path.join(os.path.dirname(__file__), "../config"))
    file_path = os.path.join(config_dir, f"{env}.yaml")
    if not os.path.exists(file_path):
        logger.warning(f"⚠️ 未找到配置文件: {file_path}，使用默认配置。")
        return {}

    with open(file_path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    logger.info(f"✅ 已加载配置文件: {file_path}")
    return substitute_env_vars(data)


# ======================================================
# 🌍 Settings 主配置类
# ======================================================
class Settings(BaseSettings):
    app: AppConfig = AppConfig()
    google: GoogleConfig = GoogleConfig()
    store: StoreConfig = StoreConfig()
    identity: IdentityConfig = IdentityConfig()
    codeshare: CodeShareConfig = CodeShareConfig()
    admin: AdminConfig = AdminConfig()

    model_config = SettingsConfigDict(env_file_encoding="utf-8", extra="allow")

    def __init__(self, **kwargs):
        super().__init__(**kwargs)

        env = os.getenv("APP_ENV", self.app.env or "dev")
        yaml_data = load_yaml_config(env)

        # ✅ 自动递归更新现有模块
        for field_name in type(self).model_fields:
            section = yaml_data.get(field_name)
            current_val = getattr(self, field_name)
            if section and isinstance(current_val, BaseModel):
                merged = deep_merge(current_val.model_dump(), section)
                setattr(self, field_name, type(current_val)(**merged))

        # ✅ ADMIN_EMAILS 环境变量覆盖白名单（逗号分隔）
        raw_admins = os.getenv("ADMIN_EMAILS")
        if raw_admins:
            self.admin = AdminConfig(emails=[e.strip() for e in raw_admins.split(",") if e.strip()])

    def summary(self):
        """输出配置概要"""
        logger.info(f"🌍 [{self.app.env}] {self.app.name} 配置概览：")
        for name in type(self).model_fields:
            value = getattr(self, name)
            if isinstance(value, BaseModel):
                logger.info(f"🧩 {name}: {value.model_dump()}")


# ======================================================
# 🧷 单例实例
# ======================================================
_settings_instance: Optional[Settings] = None
_settings_lock = threading.Lock()


@lru_cache()
def get_settings() -> Settings:
    """加载配置（带缓存）"""
    s = Settings()
    if s.app.debug:
        s.summary()
    return s


def get_current_settings() -> Settings:
    """线程安全全局访问"""
    global _settings_instance
    if _settings_instance is None:
        with _settings_lock:
            if _settings_instance is None:
                _settings_instance = get_settings()
    return _settings_instance


def init_settings(app: Optional[FastAPI] = None) -> Settings:
    """注册 FastAPI"""
    settings = get_current_settings()
    if app:
        app.state.settings = settings
    return settings
