"""Playground: editor state for a template engine playground in Jupyter notebooks."""

import html
import json
import logging
import uuid
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Union

from template_playground.config import PlaygroundConfig
from template_playground.core.outputs import OutputDispatcher
from template_playground.core.settings import MemoryStorage, SettingsStore
from template_playground.core.types import EngineResult, RenderMode, ViewMode
from template_playground.engines.base_engine import EngineAdapter
from template_playground.engines.jinja_engine import JinjaEngine
from template_playground.layouts.horizontal import compute_horizontal_layout
from template_playground.layouts.panes import PaneLayout
from template_playground.layouts.vertical import compute_vertical_layout
from template_playground.logging_config import LOGGER_NAME
from template_playground.styles.colors import (
    CONTEXT_EDITOR_BACKGROUND,
    DIVIDER_COLOR,
    EDITOR_BACKGROUND,
    MONO_FONT,
    OUTPUT_BACKGROUNDS,
    TEXT_COLOR,
    VIEW_LABELS,
)

logger = logging.getLogger(__name__)

PLAYGROUND_HEIGHT = 800  # px, editors + divider + output
STALE_MESSAGE = "Edited in the browser. Call apply_changes() and display again to refresh."

DEFAULT_CONTEXT: Dict[str, Any] = {
    "name": "World",
    "nav": [
        {"href": "/", "title": "Index"},
        {"href": "/help", "title": "Help"},
        {"href": "/about", "title": "About"},
    ],
}

DEFAULT_TEMPLATE = """\
<nav>
  <ul>
    {%- for item in nav %}
    <li><a href="{{ item.href }}">{{ item.title }}</a>
    {%- endfor %}
  </ul>
</nav>
<main>
  Hello {{ name }}!
</main>
"""


def default_context_text() -> str:
    return json.dumps(DEFAULT_CONTEXT, indent=2)


@dataclass(frozen=True)
class EditorSnapshot:
    """Immutable copy of the editor state at one point in time."""

    template: str
    template_context: str
    render_mode: RenderMode
    view_mode: ViewMode

    def to_dict(self) -> Dict[str, str]:
        return {
            "template": self.template,
            "template_context": self.template_context,
            "render_mode": self.render_mode.value,
            "view_mode": self.view_mode.value,
        }


class Playground:
    """Editable template + JSON context with a live engine output view.

    The playground owns the template source, the context text, the render
    mode and the view mode. Every update is applied synchronously and the
    active output view is re-derived immediately, so ``output`` always
    reflects the current state.

    Parameters
    ----------
    template : str, optional
        Initial template source. Defaults to a small HTML sample.
    template_context : str or dict, optional
        Initial context, either JSON text or a JSON-serializable value.
    render_mode : RenderMode or str, optional
        How the template is interpreted (html, text or json).
    view_mode : ViewMode or str, optional
        Which output view is shown first.
    engine : EngineAdapter, optional
        Template engine adapter. Defaults to Jinja2.
    store : SettingsStore, optional
        Persistence for pane sizes. Defaults to ``config.settings_path``.
    config : PlaygroundConfig, optional
        Session defaults. When given, its ``log_level`` is applied to the
        ``template_playground`` logger.

    Examples
    --------
    >>> pg = Playground("Hello {{ name }}!", {"name": "World"}, render_mode="text")
    >>> pg.output_text
    'Hello World!'
    >>> pg.view_mode = "tokens"
    >>> pg.display()
    """

    def __init__(
        self,
        template: Optional[str] = None,
        template_context: Union[str, Any, None] = None,
        render_mode: Union[RenderMode, str, None] = None,
        view_mode: Union[ViewMode, str, None] = None,
        engine: Optional[EngineAdapter] = None,
        store: Optional[SettingsStore] = None,
        config: Optional[PlaygroundConfig] = None,
    ) -> None:
        self.config = config or PlaygroundConfig()
        if config is not None:
            logging.getLogger(LOGGER_NAME).setLevel(config.log_level)
        self.engine = engine or JinjaEngine(strict_undefined=self.config.strict_undefined)
        self.store = store if store is not None else self._default_store()
        self.layout = PaneLayout(
            self.store,
            context_width=self.config.context_width,
            output_height=self.config.output_height,
            min_size=self.config.min_pane_size,
        )

        self._template = DEFAULT_TEMPLATE if template is None else template
        self._template_context = self._context_text(template_context)
        self._render_mode = RenderMode(render_mode or self.config.render_mode)
        self.dispatcher = OutputDispatcher(
            self.engine, ViewMode(view_mode or self.config.view_mode)
        )
        self._listeners: List[Callable[[EngineResult], None]] = []
        self._uid = uuid.uuid4().hex[:12]
        self._output = self._derive()

    def _default_store(self) -> SettingsStore:
        if self.config.settings_path is None:
            return SettingsStore(MemoryStorage(), namespace=self.config.namespace)
        return SettingsStore.from_path(self.config.settings_path, namespace=self.config.namespace)

    @staticmethod
    def _context_text(value: Union[str, Any, None]) -> str:
        if value is None:
            return default_context_text()
        if isinstance(value, str):
            return value
        return json.dumps(value, indent=2)

    # ------------------------------------------------------------ State
    @property
    def template(self) -> str:
        return self._template

    @template.setter
    def template(self, value: str) -> None:
        self.set_template(value)

    @property
    def template_context(self) -> str:
        """The context as JSON text, exactly as edited."""
        return self._template_context

    @template_context.setter
    def template_context(self, value: Union[str, Any]) -> None:
        self.set_template_context(value)

    @property
    def render_mode(self) -> RenderMode:
        return self._render_mode

    @render_mode.setter
    def render_mode(self, value: Union[RenderMode, str]) -> None:
        self.set_render_mode(value)

    @property
    def view_mode(self) -> ViewMode:
        return self.dispatcher.mode

    @view_mode.setter
    def view_mode(self, value: Union[ViewMode, str]) -> None:
        self.set_view_mode(value)

    @property
    def is_html(self) -> bool:
        return self._render_mode is RenderMode.HTML

    @is_html.setter
    def is_html(self, value: bool) -> None:
        self.set_render_mode(RenderMode.HTML if value else RenderMode.TEXT)

    def set_template(self, value: str) -> EngineResult:
        self._template = value
        return self._update()

    def set_template_context(self, value: Union[str, Any]) -> EngineResult:
        """Replace the context. Non-string values are stored as pretty JSON."""
        self._template_context = self._context_text(value)
        return self._update()

    def set_render_mode(self, value: Union[RenderMode, str]) -> EngineResult:
        self._render_mode = RenderMode(value)
        return self._update()

    def set_view_mode(self, value: Union[ViewMode, str]) -> EngineResult:
        """Select another output view and run it fresh."""
        self.dispatcher.select(ViewMode(value))
        return self._update()

    def apply_changes(self, changes: Dict[str, Any]) -> EngineResult:
        """Apply edits captured in the browser (the ``data-changes`` payload).

        Recognised keys: template, template_context, render_mode, view_mode.
        Unknown keys are ignored.
        """
        setters = {
            "template": self.set_template,
            "template_context": self.set_template_context,
            "render_mode": self.set_render_mode,
            "view_mode": self.set_view_mode,
        }
        for key, value in changes.items():
            setter = setters.get(key)
            if setter is None:
                logger.debug("Ignoring unknown change %r", key)
                continue
            setter(value)
        return self._output

    def reset(self) -> EngineResult:
        """Restore the default sample template and context."""
        self._template = DEFAULT_TEMPLATE
        self._template_context = default_context_text()
        return self._update()

    def snapshot(self) -> EditorSnapshot:
        return EditorSnapshot(
            template=self._template,
            template_context=self._template_context,
            render_mode=self._render_mode,
            view_mode=self.view_mode,
        )

    def on_change(self, callback: Callable[[EngineResult], None]) -> None:
        """Register a callback invoked with the new output after every update."""
        self._listeners.append(callback)

    # ----------------------------------------------------------- Output
    @property
    def output(self) -> EngineResult:
        """Result of the active view for the current state."""
        return self._output

    @property
    def output_text(self) -> str:
        """Plain-text projection of ``output`` (payload or error message)."""
        return self.dispatcher.renderer.to_text(self._output)

    def run_view(self, mode: Union[ViewMode, str]) -> EngineResult:
        """Run any view against the current state without selecting it."""
        return self.dispatcher.dispatch(
            self._template, self._template_context, self._render_mode, ViewMode(mode)
        )

    def _derive(self) -> EngineResult:
        return self.dispatcher.dispatch(
            self._template, self._template_context, self._render_mode
        )

    def _update(self) -> EngineResult:
        self._output = self._derive()
        for callback in self._listeners:
            callback(self._output)
        return self._output

    # ---------------------------------------------------------- Display
    def _repr_html_(self) -> str:
        """Jupyter auto-display."""
        return self.to_html()

    def display(self) -> None:
        """Display in IPython/Jupyter."""
        from IPython.display import HTML
        from IPython.display import display as ipy_display

        ipy_display(HTML(self.to_html()))

    def to_html(self) -> str:
        """Generate the full HTML string."""
        uid = self._uid
        parts = [
            f'<div id="tpg-{uid}" class="tpg-container">',
            f"<style>{self._css(uid)}</style>",
            self._header_html(uid),
            self._editors_html(uid),
            f'<div class="tpg-divider tpg-divider-y" id="tpg-ydivider-{uid}"></div>',
            self._output_html(uid),
            self._state_script(uid),
            f"<script>{self._js(uid)}</script>",
            "</div>",
        ]
        return "\n".join(parts)

    # ------------------------------------------------------------------ CSS
    def _css(self, uid: str) -> str:
        s = f"#tpg-{uid}"
        font_size = self.config.font_size
        result_rules = "\n".join(
            f"{s} .tpg-output-pane.tpg-{kind.value} {{ background: {bg}; }}"
            for kind, bg in OUTPUT_BACKGROUNDS.items()
        )
        return f"""
{s} * {{ box-sizing: border-box; margin: 0; padding: 0; }}
{s} {{
  font-family: {MONO_FONT};
  font-size: {font_size}px; color: {TEXT_COLOR};
  display: flex; flex-direction: column;
  height: {PLAYGROUND_HEIGHT}px; background: {EDITOR_BACKGROUND};
}}
{s} .tpg-header {{
  display: flex; justify-content: space-between; align-items: center;
  padding: 6px 12px; background: black;
}}
{s} .tpg-title {{ font-weight: 700; letter-spacing: 1px; text-transform: uppercase; }}
{s} .tpg-controls {{ display: flex; gap: 6px; align-items: center; }}
{s} .tpg-btn {{
  border: 1px solid {TEXT_COLOR}; background: transparent; color: {TEXT_COLOR};
  padding: 2px 8px; font-family: inherit; font-size: 11px; cursor: pointer;
}}
{s} .tpg-btn.tpg-active {{ background: {TEXT_COLOR}; color: black; }}
{s} select.tpg-btn option {{ color: black; }}
{s} .tpg-editors {{ display: flex; min-height: 0; }}
{s} .tpg-pane {{ position: relative; min-width: 0; }}
{s} .tpg-editor {{
  width: 100%; height: 100%; resize: none; border: none; outline: none;
  padding: 16px; font-family: inherit; font-size: {font_size}px;
  color: {TEXT_COLOR}; background: {EDITOR_BACKGROUND};
  tab-size: {self.config.tab_size}; white-space: pre;
}}
{s} .tpg-context-editor {{ background: {CONTEXT_EDITOR_BACKGROUND}; }}
{s} .tpg-divider {{ background: {DIVIDER_COLOR}; flex-shrink: 0; }}
{s} .tpg-divider-x {{ cursor: ew-resize; }}
{s} .tpg-divider-y {{ height: 3px; cursor: ns-resize; }}
{s} .tpg-output-pane {{ overflow: auto; padding: 12px 16px; flex-shrink: 0; }}
{result_rules}
{s} .tpg-output {{ white-space: pre-wrap; word-wrap: normal; }}
{s} .tpg-pre {{ font-family: inherit; white-space: pre-wrap; }}
{s} .tpg-table {{ border-collapse: collapse; }}
{s} .tpg-table th, {s} .tpg-table td {{ padding: 1px 12px 1px 0; text-align: left; }}
{s} .tpg-table th {{ opacity: 0.6; font-weight: 400; text-transform: uppercase; font-size: 10px; }}
{s} .tpg-span {{ opacity: 0.6; }}
{s} .tpg-block {{ margin-bottom: 12px; }}
{s} .tpg-block-title {{ font-weight: 700; margin-bottom: 4px; }}
{s} .tpg-stale {{ padding: 4px 16px; background: black; font-size: 11px; opacity: 0.8; }}
{s} .tpg-outputs.tpg-is-stale .tpg-output-pane {{ opacity: 0.5; }}
"""

    # ------------------------------------------------------------- Header
    def _header_html(self, uid: str) -> str:
        options = []
        for mode in RenderMode:
            selected = " selected" if mode is self._render_mode else ""
            options.append(f'<option value="{mode.value}"{selected}>{mode.value.upper()}</option>')
        buttons = []
        for mode in ViewMode:
            active = " tpg-active" if mode is self.view_mode else ""
            buttons.append(
                f'<button class="tpg-btn tpg-view-btn{active}" data-view="{mode.value}">'
                f"{html.escape(VIEW_LABELS[mode])}</button>"
            )
        return (
            f'<div class="tpg-header">'
            f'<span class="tpg-title">Template Playground</span>'
            f'<div class="tpg-controls">'
            f'<select class="tpg-btn" id="tpg-render-mode-{uid}">{"".join(options)}</select>'
            f'{"".join(buttons)}'
            f"</div>"
            f"</div>"
        )

    # ------------------------------------------------------------ Editors
    def _editors_html(self, uid: str) -> str:
        rows = {r["id"]: r for r in compute_vertical_layout(self.layout.output_height, PLAYGROUND_HEIGHT)}
        items = {i["id"]: i for i in compute_horizontal_layout(self.layout.context_width)}

        def flex(item: Dict[str, Any]) -> str:
            return f'flex:{item["flex_grow"]} 0 {item["flex_basis"]};'

        return (
            f'<div class="tpg-editors" id="tpg-editors-{uid}" '
            f'style="height:{rows["editors"]["height"]}px;">'
            f'<div class="tpg-pane" style="{flex(items["template"])}">'
            f'<textarea class="tpg-editor" id="tpg-template-{uid}" spellcheck="false">'
            f"{html.escape(self._template)}</textarea>"
            f"</div>"
            f'<div class="tpg-divider tpg-divider-x" id="tpg-xdivider-{uid}" '
            f'style="{flex(items["divider"])}"></div>'
            f'<div class="tpg-pane" id="tpg-context-pane-{uid}" style="{flex(items["context"])}">'
            f'<textarea class="tpg-editor tpg-context-editor" id="tpg-context-{uid}" '
            f'spellcheck="false">{html.escape(self._template_context)}</textarea>'
            f"</div>"
            f"</div>"
        )

    # ------------------------------------------------------------- Output
    def _output_html(self, uid: str) -> str:
        """Every view is rendered so switching in the browser needs no kernel."""
        parts = []
        for mode, renderer in self.dispatcher.renderers.items():
            result = self._output if mode is self.view_mode else self.run_view(mode)
            hidden = "" if mode is self.view_mode else "display:none;"
            parts.append(
                f'<div class="tpg-output-pane tpg-{result.kind.value}" '
                f'data-pane="{mode.value}" '
                f'style="height:{self.layout.output_height}px;{hidden}">'
                f"{renderer.to_html(result)}"
                f"</div>"
            )
        stale = (
            f'<div class="tpg-stale" id="tpg-stale-{uid}" style="display:none;">'
            f"{html.escape(STALE_MESSAGE)}</div>"
        )
        return f'<div class="tpg-outputs" id="tpg-outputs-{uid}">{stale}{"".join(parts)}</div>'

    # ------------------------------------------------------ State JSON
    def _state_script(self, uid: str) -> str:
        """Embed the editor state and layout settings for the browser side."""
        state = self.snapshot().to_dict()
        state.update(
            {
                "namespace": self.store.namespace,
                "context_width": self.layout.context_width,
                "output_height": self.layout.output_height,
                "min_size": self.layout.context_divider.min_size,
                "width_key": self.layout.context_divider.setting_key,
                "height_key": self.layout.output_divider.setting_key,
                "total_height": PLAYGROUND_HEIGHT,
            }
        )
        # "</" would end the script element early
        payload = json.dumps(state, ensure_ascii=False).replace("</", "<\\/")
        return f"<script>var tpgState_{uid} = {payload};</script>"

    # ---------------------------------------------------------- JavaScript
    def _js(self, uid: str) -> str:
        return f"""
(function() {{
  var container = document.getElementById('tpg-{uid}');
  if (!container) return;
  var state = typeof tpgState_{uid} !== 'undefined' ? tpgState_{uid} : {{}};
  var editors = document.getElementById('tpg-editors-{uid}');
  var contextPane = document.getElementById('tpg-context-pane-{uid}');
  var outputs = container.querySelectorAll('.tpg-output-pane');
  var outputsBox = document.getElementById('tpg-outputs-{uid}');
  var staleBanner = document.getElementById('tpg-stale-{uid}');
  var pendingChanges = {{}};

  // Persisted settings, namespaced like the Python SettingsStore
  function loadSetting(key, fallback) {{
    try {{
      var raw = localStorage.getItem(state.namespace + ':' + key);
      if (raw === null) return fallback;
      var value = JSON.parse(raw);
      return typeof value === 'number' ? value : fallback;
    }} catch (_) {{
      return fallback;
    }}
  }}
  function saveSetting(key, value) {{
    try {{ localStorage.setItem(state.namespace + ':' + key, JSON.stringify(value)); }} catch (_) {{ }}
  }}

  function applyWidth(width) {{
    contextPane.style.flexBasis = width + 'px';
  }}
  function applyHeight(height) {{
    outputs.forEach(function(el) {{ el.style.height = height + 'px'; }});
    editors.style.height = Math.max(state.total_height - height - 3, 0) + 'px';
  }}

  var sizes = {{
    width: loadSetting(state.width_key, state.context_width),
    height: loadSetting(state.height_key, state.output_height)
  }};
  applyWidth(sizes.width);
  applyHeight(sizes.height);

  // Drag session: captured on mousedown, released on mouseup
  var session = null;

  function handleDragMove(e) {{
    if (!session) return;
    var coord = session.axis === 'x' ? e.pageX : e.pageY;
    var size = Math.max(session.sizeBase - (coord - session.mouseBase), state.min_size);
    sizes[session.target] = size;
    if (session.target === 'width') applyWidth(size); else applyHeight(size);
    saveSetting(session.key, size);
  }}

  function handleDragEnd() {{
    session = null;
    document.removeEventListener('mousemove', handleDragMove);
    document.removeEventListener('mouseup', handleDragEnd);
  }}

  function startDrag(axis, target, key) {{
    return function(e) {{
      if (e.button !== 0) return;
      e.preventDefault();
      session = {{
        axis: axis,
        target: target,
        key: key,
        mouseBase: axis === 'x' ? e.pageX : e.pageY,
        sizeBase: sizes[target]
      }};
      document.addEventListener('mousemove', handleDragMove);
      document.addEventListener('mouseup', handleDragEnd);
    }};
  }}

  document.getElementById('tpg-xdivider-{uid}')
    .addEventListener('mousedown', startDrag('x', 'width', state.width_key));
  document.getElementById('tpg-ydivider-{uid}')
    .addEventListener('mousedown', startDrag('y', 'height', state.height_key));

  // View mode buttons switch between the pre-rendered views
  var viewButtons = container.querySelectorAll('.tpg-view-btn');
  viewButtons.forEach(function(btn) {{
    btn.addEventListener('click', function() {{
      var view = btn.getAttribute('data-view');
      viewButtons.forEach(function(b) {{ b.classList.toggle('tpg-active', b === btn); }});
      outputs.forEach(function(el) {{
        el.style.display = el.getAttribute('data-pane') === view ? '' : 'none';
      }});
      recordChange('view_mode', view);
    }});
  }});

  // Edits are collected for Playground.apply_changes()
  function recordChange(key, value) {{
    pendingChanges[key] = value;
    container.setAttribute('data-changes', JSON.stringify(pendingChanges));
    container.setAttribute('data-has-changes', 'true');
    // View switches use pre-rendered panes; any other edit leaves them stale
    if (key !== 'view_mode') {{
      outputsBox.classList.add('tpg-is-stale');
      outputsBox.setAttribute('data-stale', 'true');
      staleBanner.style.display = '';
    }}
    var event = new CustomEvent('tpg-changes', {{
      detail: {{ changes: pendingChanges, uid: '{uid}' }}
    }});
    container.dispatchEvent(event);
  }}

  document.getElementById('tpg-template-{uid}').addEventListener('input', function(e) {{
    recordChange('template', e.target.value);
  }});
  document.getElementById('tpg-context-{uid}').addEventListener('input', function(e) {{
    recordChange('template_context', e.target.value);
  }});
  document.getElementById('tpg-render-mode-{uid}').addEventListener('change', function(e) {{
    recordChange('render_mode', e.target.value);
  }});

  // Tab inserts spaces instead of leaving the editor
  container.querySelectorAll('.tpg-editor').forEach(function(el) {{
    el.addEventListener('keydown', function(e) {{
      if (e.key !== 'Tab') return;
      e.preventDefault();
      var pad = new Array({self.config.tab_size} + 1).join(' ');
      var start = el.selectionStart;
      el.value = el.value.slice(0, start) + pad + el.value.slice(el.selectionEnd);
      el.selectionStart = el.selectionEnd = start + pad.length;
      el.dispatchEvent(new Event('input'));
    }});
  }});
}})();
"""
