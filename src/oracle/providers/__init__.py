"""Language model clients behind one completion interface."""

from oracle.providers.anthropic import Anthropic
from oracle.providers.base import LanguageModel
from oracle.providers.dummy import Dummy
from oracle.providers.factory import build_language_model
from oracle.providers.ollama import Ollama
from oracle.providers.openai import ChatGPT
from oracle.providers.vertex import Vertex

__all__ = ["Anthropic", "ChatGPT", "Dummy", "LanguageModel", "Ollama", "Vertex", "build_language_model"]
