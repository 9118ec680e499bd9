"""Operator dashboard fragments (configuration status and token usage).

Response formatting:
    Both renderers return small HTML fragments. Every interpolated value is
    HTML-escaped. They never raise for an empty store or an empty registry.
"""

from html import escape

from aixo.core.dispatcher import Dispatcher
from aixo.usage.store import UsageStore


def render_status(dispatcher: Dispatcher) -> str:
    """Render default configuration and per-provider availability."""
    settings = dispatcher.settings
    default_provider = str(settings.get("aixo.default_provider", "(none)"))
    default_model = str(settings.get("aixo.default_model", ""))
    default_temperature = str(settings.get("aixo.default_temperature", ""))

    parts = [
        "<h3>Aixo Configuration</h3>",
        f"<p><strong>Default Provider:</strong> {escape(default_provider)}</p>",
        f"<p><strong>Default Model:</strong> {escape(default_model)}</p>",
        f"<p><strong>Default Temperature:</strong> {escape(default_temperature)}</p>",
        f"<p><strong>Debug Mode:</strong> {'On' if settings.debug else 'Off'}</p>",
        "<h4>Available Providers:</h4><ul>",
    ]

    providers = dispatcher.get_providers()
    if providers:
        for key, provider in providers.items():
            status = "✅ Ready" if provider.is_available() else "⚠️ Not Configured"
            mark = " (default)" if key == default_provider.lower() else ""
            parts.append(f"<li><strong>{escape(provider.name)}:</strong> {status}{mark}</li>")
    else:
        parts.append("<li>No providers loaded.</li>")
    parts.append("</ul>")

    return "".join(parts)


def render_usage(store: UsageStore) -> str:
    """Render the most recent usage row and token totals per provider/model."""
    last = store.latest()
    if last is not None:
        last_info = (
            f"Last Request: {last.provider} (model {last.model}) used {last.tokens} tokens "
            f"at {last.timestamp.strftime('%Y-%m-%d %H:%M:%S')}."
        )
    else:
        last_info = "Last Request: (no data yet)"

    stats = [
        f"{total.provider or 'Unknown'} (model {total.model or 'Unknown'}): {total.tokens} tokens"
        for total in store.totals()
    ]

    parts = ["<div class='aixo-token-stats'>", f"<p><strong>{escape(last_info)}</strong></p>"]
    if stats:
        parts.append("<h4>Total Tokens Used (by Provider/Model):</h4><ul>")
        parts.extend(f"<li>{escape(line)}</li>" for line in stats)
        parts.append("</ul>")
    parts.append("</div>")
    return "".join(parts)
