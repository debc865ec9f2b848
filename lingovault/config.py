"""
配置模块 (Configuration Module)
==============================

从环境变量和 .env 文件加载计划请求所用的 LLM 配置。

导入核心（计划规范化、记录提取、字段修复、去重合并）不读取这里的任何设置，
所有参数都由调用方显式传入；只有 LLMClient 通过 get_settings 取配置。
"""

from dotenv import load_dotenv
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()


class Settings(BaseSettings):
    """
    LLM 连接配置。

    属性:
        OPENAI_BASE_URL: OpenAI 兼容接口地址，可指向 Gemini / DeepSeek 等兼容网关
        OPENAI_API_KEY: API 密钥（必填）
        OPENAI_MODEL: 生成导入计划的模型
        TEMPERATURE: 生成温度；计划需要可复现，默认 0
        REQUEST_TIMEOUT: 单次请求超时秒数
    """
    model_config = SettingsConfigDict(
        env_file=".env", case_sensitive=False, extra="ignore", validate_default=True
    )

    OPENAI_BASE_URL: str = "https://api.openai.com/v1"
    OPENAI_API_KEY: str = ""
    OPENAI_MODEL: str = "gpt-4o-mini"
    TEMPERATURE: float = 0.0
    REQUEST_TIMEOUT: int = 60

    @field_validator("OPENAI_API_KEY")
    @classmethod
    def validate_api_key(cls, v: str) -> str:
        if v is None or not v.strip():
            raise ValueError(
                "OPENAI_API_KEY is not set or empty. "
                "Set it in the environment or in .env before requesting an import plan."
            )
        return v


_settings_instance = None


def get_settings() -> Settings:
    """配置单例，首次调用时创建。"""
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Settings()
    return _settings_instance
