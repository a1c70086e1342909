"""Gemini code-generation adapter."""

from __future__ import annotations

import json
from typing import Any

import httpx
from pydantic import ValidationError as PydanticValidationError

from autodeploy.core.errors import ServiceError
from autodeploy.logging_config import get_logger
from autodeploy.models.project import GenerationMode, Project

logger = get_logger(__name__)

GEMINI_API_BASE = "https://generativelanguage.googleapis.com/v1beta"
GENERATION_FAILED_MESSAGE = "I failed to process the code. Please try again."

PROJECT_SCHEMA: dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "name": {
            "type": "STRING",
            "description": "A URL-friendly kebab-case name for the project.",
        },
        "description": {
            "type": "STRING",
            "description": "A short description of what the app does.",
        },
        "files": {
            "type": "ARRAY",
            "description": "The source code files for the application.",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "path": {
                        "type": "STRING",
                        "description": "The file path (e.g., 'src/App.tsx').",
                    },
                    "content": {
                        "type": "STRING",
                        "description": "The full text content of the file.",
                    },
                },
                "required": ["path", "content"],
            },
        },
    },
    "required": ["name", "description", "files"],
}

DEPLOYMENT_RULES = """
Hosting deployment rules:
1. vercel.json is required in the root with exactly this content:
   { "rewrites": [{ "source": "/(.*)", "destination": "/index.html" }] }
2. vite.config.ts must be standard and build to the 'dist' folder.
3. index.html must be in the root directory and its script src must point to "/src/main.tsx".
4. package.json 'scripts' must contain "build": "vite build".
"""

GENERATE_INSTRUCTION = f"""
You are a full-stack developer. Generate a complete, production-ready React + Vite application.
Stack rules:
1. Framework: Vite + React + TypeScript.
2. Styling: Tailwind CSS.
3. Icons: 'lucide-react'.
4. package.json dependencies: 'react', 'react-dom', 'lucide-react', 'clsx', 'tailwind-merge'.
   Dev dependencies: 'vite', 'typescript', 'tailwindcss', 'postcss', 'autoprefixer'.
{DEPLOYMENT_RULES}
Return only the JSON structure matching the schema.
"""

PASTE_INSTRUCTION = f"""
You are a code architect. The user is pasting a blob of code.
Parse the text, identify distinct files and structure them into a deployable project.
Rules:
1. File separation: look for comments like "// File: App.tsx".
2. Missing files: generate 'index.html', 'package.json', 'vite.config.ts', 'src/main.tsx',
   'src/index.css' and 'vercel.json' when they are absent.
{DEPLOYMENT_RULES}
Return only the JSON structure matching the schema.
"""


def system_instruction(mode: GenerationMode) -> str:
    if mode is GenerationMode.PASTE:
        return PASTE_INSTRUCTION
    return GENERATE_INSTRUCTION


class GeminiAdapter:
    """Generate projects through the Gemini ``generateContent`` endpoint."""

    def __init__(
        self,
        *,
        api_key: str,
        model: str = "gemini-2.0-flash",
        temperature: float = 0.2,
        base_url: str = GEMINI_API_BASE,
        timeout: float = 120.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = api_key
        self._model = model
        self._temperature = temperature
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    async def generate(self, prompt: str, mode: GenerationMode) -> Project:
        if not self._api_key:
            raise ServiceError("Gemini API Key is missing from environment variables.")

        request = {
            "systemInstruction": {"parts": [{"text": system_instruction(mode)}]},
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": {
                "responseMimeType": "application/json",
                "responseSchema": PROJECT_SCHEMA,
                "temperature": self._temperature,
            },
        }
        try:
            async with httpx.AsyncClient(
                base_url=self._base_url,
                timeout=self._timeout,
                transport=self._transport,
            ) as client:
                resp = await client.post(
                    f"/models/{self._model}:generateContent",
                    headers={"x-goog-api-key": self._api_key},
                    json=request,
                )
                resp.raise_for_status()
            text = self._response_text(resp.json())
            project = Project.model_validate(json.loads(text))
        except (httpx.HTTPError, ValueError, KeyError, PydanticValidationError) as exc:
            logger.warning("gemini_generation_failed", mode=mode.value, error=str(exc))
            raise ServiceError(GENERATION_FAILED_MESSAGE) from exc

        logger.info(
            "gemini_project_generated",
            mode=mode.value,
            name=project.name,
            files=len(project.files),
        )
        return project

    @staticmethod
    def _response_text(payload: dict[str, Any]) -> str:
        candidates = payload.get("candidates") or []
        if not candidates:
            raise ValueError("No response from AI.")
        parts = candidates[0]["content"]["parts"]
        text = "".join(str(part.get("text", "")) for part in parts)
        if not text:
            raise ValueError("No response from AI.")
        return text
