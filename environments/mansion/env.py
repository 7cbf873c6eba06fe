"""Mansion environment actor – compact, principled entrypoint."""

from __future__ import annotations

import gc
import logging
import os
import random
import time
from typing import List, Optional

from ._models import MansionChallenge
from ._render import render_events
from ._scenario import load_scenario
from ._session import get_session_manager
from ._task import MansionTask

logger = logging.getLogger(__name__)


class LLMConfig:
    """LLM call configuration."""

    def __init__(
        self,
        model: str,
        base_url: str,
        timeout: int,
        temperature: float,
        api_key: str,
        seed: Optional[int] = None,
    ):
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.temperature = temperature
        self.api_key = api_key
        self.seed = seed


async def chat(messages: List[dict], config: LLMConfig) -> str:
    """Minimal OpenAI-compatible chat helper."""
    import httpx
    import openai

    os.environ.pop("SSL_CERT_FILE", None)
    os.environ.pop("REQUESTS_CA_BUNDLE", None)

    client = openai.AsyncOpenAI(
        base_url=config.base_url,
        api_key=config.api_key,
        timeout=httpx.Timeout(config.timeout),
        max_retries=0,
    )

    params = {
        "model": config.model,
        "messages": messages,
        "temperature": config.temperature,
        "stream": False,
    }
    if config.seed is not None:
        params["seed"] = config.seed

    response = await client.chat.completions.create(**params)
    if not response.choices or response.choices[0].message.content is None:
        raise ValueError("LLM API returned no content")
    return response.choices[0].message.content.strip()


# --- play loops -------------------------------------------------------------

async def _run_multi_turn(task: MansionTask, challenge: MansionChallenge, convo: List[dict], config: LLMConfig):
    for _ in range(MansionTask.MAX_TURNS):
        response = await chat(convo, config)
        convo.append({"role": "assistant", "content": response})

        message, done, result = await task.process_response(challenge.session_id, response)
        convo.append({"role": "user", "content": message})

        if done:
            score = result.get("score", 0.0) if result else 0.0
            return score, result

    return 0.0, {"error": "max_turns_reached"}


async def _run_single_turn(task: MansionTask, challenge: MansionChallenge, convo: List[dict], config: LLMConfig):
    response = await chat(convo, config)
    convo.append({"role": "assistant", "content": response})

    score = await task.evaluate(response, challenge)
    state = task.session_manager.get_session_state(challenge.session_id)
    final = {
        "score": score,
        "moves": state["moves"],
        "dossier": state["dossier"],
        "status": state["status"],
    }
    return score, final


# --- Actor ------------------------------------------------------------------

class Actor:
    """Thin façade over mansion sessions, for agents and programmatic play."""

    def __init__(self, api_key: Optional[str] = None):
        self.api_key = api_key or os.getenv("CHUTES_API_KEY")
        self.session_manager = get_session_manager()

    def _llm_config(
        self,
        model: str,
        base_url: str,
        timeout: int,
        temperature: float,
        api_key: Optional[str],
        seed: Optional[int],
    ) -> LLMConfig:
        return LLMConfig(
            model=model,
            base_url=base_url,
            timeout=timeout,
            temperature=temperature,
            api_key=api_key or self.api_key,
            seed=seed,
        )

    async def evaluate(
        self,
        model: str = "deepseek-ai/DeepSeek-V3",
        base_url: str = "https://llm.chutes.ai/v1",
        timeout: int = 600,
        temperature: float = 0.7,
        api_key: Optional[str] = None,
        seed: Optional[int] = None,
        task_id: Optional[int] = None,
        scenario_path: Optional[str] = None,
        multi_turn: bool = True,
    ):
        llm_seed = seed if seed is not None else random.randint(0, 2**32 - 1)
        llm_config = self._llm_config(model, base_url, timeout, temperature, api_key, llm_seed)

        task = MansionTask(scenario=load_scenario(scenario_path), session_manager=self.session_manager)

        start = time.time()
        challenge = await task.generate(task_id=task_id)
        convo = [{"role": "user", "content": challenge.prompt}]

        try:
            if multi_turn:
                score, final = await _run_multi_turn(task, challenge, convo, llm_config)
            else:
                score, final = await _run_single_turn(task, challenge, convo, llm_config)
            summary = self.session_manager.summarize(challenge.session_id, convo)
            error = None
        except Exception as exc:  # pragma: no cover
            import traceback

            logger.exception("Mansion evaluation failed")
            score = 0.0
            final = None
            summary = None
            error = f"{type(exc).__name__}: {exc}\n{traceback.format_exc()}"
        finally:
            self.session_manager.close_session(challenge.session_id)
            gc.collect()

        result = {
            "task_name": "mansion:detective",
            "score": score,
            "success": score > 0,
            "time_taken": time.time() - start,
            "extra": {
                "conversation": convo,
                "seed": llm_seed,
                "task_id": challenge.task_id,
                "scenario": challenge.scenario,
                "evaluation": final,
                "summary": summary.model_dump(mode="json") if summary else None,
            },
        }
        if error:
            result["error"] = error
            result["error_type"] = "evaluation_failure"
        return result

    async def create_session(self, scenario_path: Optional[str] = None):
        info = self.session_manager.create_session(load_scenario(scenario_path))
        return {
            "session_id": info.session_id,
            "scenario": info.scenario,
            "start_room": info.start_room,
            "exits": info.exits,
            "suspects": info.suspects,
            "opening": render_events(self.session_manager.opening_events(info.session_id)),
        }

    async def move(self, session_id: str, choice: str):
        outcome = self.session_manager.move(session_id, choice)
        outcome["events"] = [event.model_dump(mode="json") for event in outcome["events"]]
        return outcome

    async def accuse(self, session_id: str, accused_name: str):
        result = self.session_manager.accuse(session_id, accused_name)
        result["events"] = [event.model_dump(mode="json") for event in result["events"]]
        return result

    async def get_state(self, session_id: str):
        return self.session_manager.get_session_state(session_id)


__all__ = ["Actor"]
