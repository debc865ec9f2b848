"""
LLM 客户端模块 (LLM Client Module)
=================================

智能导入只需要一种模型调用：发送样本，取回一个 JSON 计划。
本模块用 AsyncOpenAI 完成调用，对外提供同步接口:

- chat_json: tenacity 重试（3 次，指数退避）
- chat_json_once: 单次调用，失败立即抛出

模型输出经 JSONParser 解析；无法解析时返回错误标记字典而不是抛异常，
由调用方决定如何处理（计划请求器将其视为 PlanMalformed）。
"""

from __future__ import annotations

import asyncio
import json
import re
import threading
import time
from dataclasses import asdict, dataclass, field
from functools import partial
from typing import Any, Dict, List, Optional, Union

import httpx
from openai import AsyncOpenAI
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from lingovault.config import get_settings
from lingovault.logger import get_logger

logger = get_logger(__name__)

MAX_ATTEMPTS = 3
CONNECT_TIMEOUT = 10.0
RAW_OUTPUT_LIMIT = 5000

JSONResult = Union[dict, list]

_FENCED_JSON_RE = re.compile(r"```(?:json)?\s*(\{.*\}|\[.*\])\s*```", re.DOTALL)


@dataclass
class TokenTracker:
    """累计多次请求的 token 消耗。"""
    input_tokens: int = 0
    output_tokens: int = 0
    total_tokens: int = 0
    requests_count: int = 0

    def update(self, response: Any) -> None:
        usage = getattr(response, "usage", None)
        if usage is None:
            return
        prompt_tokens = int(getattr(usage, "prompt_tokens", 0) or 0)
        completion_tokens = int(getattr(usage, "completion_tokens", 0) or 0)
        self.input_tokens += prompt_tokens
        self.output_tokens += completion_tokens
        self.total_tokens += int(getattr(usage, "total_tokens", 0) or (prompt_tokens + completion_tokens))
        self.requests_count += 1

    def get(self) -> Dict[str, int]:
        return asdict(self)

    def reset(self) -> None:
        self.input_tokens = self.output_tokens = self.total_tokens = self.requests_count = 0


@dataclass
class CallInfo:
    """最近一次调用的诊断信息，供日志与排障使用。"""
    method: str
    step: Optional[str]
    model: str
    timeout: Any
    prompt_chars: int
    retries: int = 0
    status: str = "in_progress"
    started_at: float = field(default_factory=time.time)
    elapsed_ms: int = 0
    error: Optional[str] = None

    def finish(self, status: str, error: Optional[str] = None) -> None:
        self.status = status
        self.elapsed_ms = int((time.time() - self.started_at) * 1000)
        self.error = error


class JSONParser:
    """
    模型响应的 JSON 解析。

    依次尝试：整段严格解析 → ```json 代码块 → 第一个括号平衡片段。
    全部失败时返回 {"error": "json_parse_error", "raw_output", "parse_error"}。
    """

    @staticmethod
    def parse(text: str) -> JSONResult:
        raw = (text or "").strip()
        if not raw:
            return JSONParser._error("", "empty_output")

        for candidate in JSONParser._candidates(raw):
            try:
                return json.loads(candidate)
            except json.JSONDecodeError:
                continue
        return JSONParser._error(raw[:RAW_OUTPUT_LIMIT], "unable_to_parse_json")

    @staticmethod
    def is_error(result: Any) -> bool:
        return isinstance(result, dict) and result.get("error") == "json_parse_error"

    @staticmethod
    def _error(raw_output: str, reason: str) -> dict:
        return {"error": "json_parse_error", "raw_output": raw_output, "parse_error": reason}

    @staticmethod
    def _candidates(raw: str):
        yield raw
        fenced = _FENCED_JSON_RE.search(raw)
        if fenced:
            yield fenced.group(1)
        balanced = JSONParser._balanced_slice(raw)
        if balanced is not None:
            yield balanced

    @staticmethod
    def _balanced_slice(text: str) -> Optional[str]:
        starts = [idx for idx in (text.find("{"), text.find("[")) if idx != -1]
        if not starts:
            return None
        start = min(starts)
        opener = text[start]
        closer = "}" if opener == "{" else "]"
        depth = 0
        for idx in range(start, len(text)):
            if text[idx] == opener:
                depth += 1
            elif text[idx] == closer:
                depth -= 1
                if depth == 0:
                    return text[start : idx + 1]
        return None


def _log_retry(retry_state: Any, method: str) -> None:
    client = retry_state.args[0] if retry_state.args else None
    if isinstance(client, LLMClient):
        client._retries = retry_state.attempt_number
    error = retry_state.outcome.exception() if retry_state.outcome else None
    logger.warning(
        "LLM %s retrying (attempt %d/%d) | step=%s | model=%s | error=%s",
        method,
        retry_state.attempt_number,
        MAX_ATTEMPTS,
        (retry_state.kwargs or {}).get("step"),
        getattr(client, "model", None),
        error,
    )


_llm_client_instance: Optional["LLMClient"] = None


def get_llm_client() -> "LLMClient":
    """进程内共享的 LLMClient，首次调用时按当前配置创建。"""
    global _llm_client_instance
    if _llm_client_instance is None:
        _llm_client_instance = LLMClient()
    return _llm_client_instance


def reset_llm_client() -> None:
    """丢弃共享客户端，配置变更或测试时使用。"""
    global _llm_client_instance
    _llm_client_instance = None


class LLMClient:
    """OpenAI 兼容接口的 JSON 调用客户端。"""

    def __init__(self) -> None:
        settings = get_settings()
        self.model = settings.OPENAI_MODEL
        self.temperature = settings.TEMPERATURE
        self.timeout = settings.REQUEST_TIMEOUT
        self.client = AsyncOpenAI(
            api_key=settings.OPENAI_API_KEY,
            base_url=settings.OPENAI_BASE_URL,
            timeout=httpx.Timeout(settings.REQUEST_TIMEOUT, connect=CONNECT_TIMEOUT),
        )
        self.token_tracker = TokenTracker()
        self._last_call: Optional[CallInfo] = None
        self._retries = 0
        logger.info("LLMClient initialized with model=%s", self.model)

    # -- diagnostics ---------------------------------------------------------

    def get_last_call_info(self) -> Optional[Dict[str, Any]]:
        return asdict(self._last_call) if self._last_call else None

    def get_token_usage(self) -> Dict[str, int]:
        return self.token_tracker.get()

    def reset_token_usage(self) -> None:
        self.token_tracker.reset()

    # -- public API ----------------------------------------------------------

    def chat_json(
        self,
        prompt: str,
        system: Optional[str] = None,
        temperature: Optional[float] = None,
        step: Optional[str] = None,
    ) -> JSONResult:
        """带重试的 JSON 调用；所有尝试失败后抛出最后一次的异常。"""
        self._retries = 0
        return self._chat_json_with_retry(prompt, system=system, temperature=temperature, step=step)

    def chat_json_once(
        self,
        prompt: str,
        system: Optional[str] = None,
        temperature: Optional[float] = None,
        timeout: Optional[Union[float, httpx.Timeout]] = None,
        step: Optional[str] = None,
    ) -> JSONResult:
        """单次调用，不重试，用于需要快速失败的流程。"""
        self._retries = 0
        return self._run_sync(
            self._request_json(
                prompt,
                system=system,
                temperature=temperature,
                timeout=timeout,
                step=step,
                method="chat_json_once",
            )
        )

    # -- internals -----------------------------------------------------------

    @retry(
        stop=stop_after_attempt(MAX_ATTEMPTS),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        retry=retry_if_exception_type(Exception),
        before_sleep=partial(_log_retry, method="chat_json"),
        reraise=True,
    )
    def _chat_json_with_retry(
        self,
        prompt: str,
        system: Optional[str] = None,
        temperature: Optional[float] = None,
        step: Optional[str] = None,
    ) -> JSONResult:
        return self._run_sync(
            self._request_json(prompt, system=system, temperature=temperature, step=step, method="chat_json")
        )

    async def _request_json(
        self,
        prompt: str,
        system: Optional[str],
        temperature: Optional[float],
        step: Optional[str],
        method: str,
        timeout: Optional[Union[float, httpx.Timeout]] = None,
    ) -> JSONResult:
        messages: List[Dict[str, str]] = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})

        request: Dict[str, Any] = {
            "model": self.model,
            "messages": messages,
            "temperature": self.temperature if temperature is None else temperature,
            "response_format": {"type": "json_object"},
        }
        if timeout is not None:
            request["timeout"] = timeout

        call = CallInfo(
            method=method,
            step=step,
            model=self.model,
            timeout=timeout or self.timeout,
            prompt_chars=len(prompt),
            retries=self._retries,
        )
        self._last_call = call
        logger.info(
            "LLM %s start | step=%s | model=%s | timeout=%s | prompt_chars=%d",
            method,
            step,
            self.model,
            call.timeout,
            call.prompt_chars,
        )
        try:
            response = await self.client.chat.completions.create(**request)
        except Exception as exc:
            call.finish("error", error=str(exc))
            raise

        self.token_tracker.update(response)
        call.finish("ok")
        logger.info(
            "LLM %s done | step=%s | elapsed_ms=%d | retries=%d",
            method,
            step,
            call.elapsed_ms,
            call.retries,
        )
        return JSONParser.parse(response.choices[0].message.content or "")

    @staticmethod
    def _run_sync(coro: Any) -> Any:
        """
        在同步上下文中执行协程。

        没有运行中的事件循环时直接 asyncio.run；已在事件循环内（例如
        FastAPI 的异步处理器）时改在辅助线程中执行，避免嵌套事件循环。
        """
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            return asyncio.run(coro)

        outcome: Dict[str, Any] = {}

        def _runner() -> None:
            try:
                outcome["result"] = asyncio.run(coro)
            except BaseException as exc:  # noqa: BLE001
                outcome["error"] = exc

        worker = threading.Thread(target=_runner, daemon=True)
        worker.start()
        worker.join()
        if "error" in outcome:
            raise outcome["error"]
        return outcome.get("result")
