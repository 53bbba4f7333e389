"""Runtime wiring helper for CLI applications."""

from dataclasses import dataclass
from pathlib import Path

from .adapters.languagetool import LanguageToolClient
from .config import ProoflineConfig, load_config
from .core.ports import RenderSink
from .session import AnalysisSession


@dataclass
class Runtime:
    """Container for all wired components."""
    config: ProoflineConfig
    client: LanguageToolClient

    def new_session(self, sink: RenderSink | None = None) -> AnalysisSession:
        return AnalysisSession(
            self.client,
            sink=sink,
            debounce_ms=self.config.scheduler.debounce_ms,
            position_base=self.config.document.position_base,
        )


def build_runtime(
    config_path: Path | None = None,
    api_url: str | None = None,
    language: str | None = None,
    debounce_ms: int | None = None,
) -> Runtime:
    """Build and wire all components; explicit arguments override the config file."""
    config = load_config(config_path=config_path)

    if api_url is not None:
        config.service.api_url = api_url
    if language is not None:
        config.service.language = language
    if debounce_ms is not None:
        config.scheduler.debounce_ms = debounce_ms

    client = LanguageToolClient(
        config.require_api_url(),
        language=config.service.language,
        timeout_seconds=config.service.timeout_seconds,
    )
    return Runtime(config=config, client=client)
