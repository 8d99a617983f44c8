"""Streamlit frontend for PromptDesk.

Browse the public template catalog, fill in template variables, generate
the final prompt text, and create or edit templates.

Run with: streamlit run frontend/app.py
"""

import uuid
from collections.abc import Callable
from pathlib import Path

import streamlit as st
import streamlit.components.v1 as components

from promptdesk.api import TemplateAPIClient, Template, TemplateVariable
from promptdesk.core.config import get_settings
from promptdesk.core.logging_config import get_logger, setup_logging
from promptdesk.interfaces.clipboard import BaseClipboard
from promptdesk.state import GenerateView, SelectorState, TemplateEditor, ViewMode
from promptdesk.state.form import SELECT_OPTIONS, input_kind, sorted_variables
from promptdesk.strategies.clipboard import FallbackClipboard

settings = get_settings()

# Page config
st.set_page_config(
    page_title="PromptDesk",
    page_icon="🧩",
    layout="wide",
    initial_sidebar_state="expanded",
)

logger = get_logger(__name__)


@st.cache_resource
def init_logging() -> None:
    """Attach file and console handlers once per server process."""
    setup_logging(settings)


@st.cache_resource
def get_client(base_url: str) -> TemplateAPIClient:
    """Shared API client for all sessions."""
    return TemplateAPIClient(base_url)


# =============================================================================
# Clipboard
# =============================================================================


def _is_secure_context() -> bool:
    """Approximate the browser's secure-context check from request headers."""
    headers = st.context.headers
    host = (headers.get("Host") or "").split(":")[0]
    if host in {"localhost", "127.0.0.1", "[::1]"}:
        return True
    if (headers.get("X-Forwarded-Proto") or "").lower() == "https":
        return True
    return (headers.get("Origin") or "").startswith("https://")


_clipboard_component = components.declare_component(
    "clipboard",
    path=str(Path(__file__).parent / "clipboard_component"),
)


class BrowserClipboard(BaseClipboard):
    """Copy in the browser through the clipboard component.

    ``copy`` only queues the request. ``render_clipboard_bridge`` hands it to
    the page, which reports back whether the copy worked.

    Args:
        method: ``"clipboard-api"`` for the Async Clipboard API (with the
            selection copy as an in-page fallback), or ``"selection"`` for the
            hidden-textarea ``execCommand('copy')`` path alone.
    """

    def __init__(self, method: str = "clipboard-api"):
        self.method = method

    @property
    def is_available(self) -> bool:
        if self.method == "clipboard-api":
            return _is_secure_context()
        return True

    def copy(self, text: str) -> bool:
        st.session_state.clipboard_request = {"id": uuid.uuid4().hex, "text": text, "method": self.method}
        return False


def render_clipboard_bridge(view: GenerateView) -> None:
    """Run the pending copy request in the page and record its outcome."""
    request = st.session_state.get("clipboard_request")
    outcome = _clipboard_component(request=request, key="clipboard_bridge", default=None)
    if request is None or not outcome or outcome.get("id") != request["id"]:
        return
    st.session_state.clipboard_request = None
    view.finish_copy(bool(outcome.get("ok")), outcome.get("error") or "")


# =============================================================================
# Session State
# =============================================================================


def push_alert(message: str) -> None:
    """Queue a blocking-style alert to show on the next render."""
    st.session_state.alerts.append(message)


def init_session_state(client: TemplateAPIClient) -> None:
    """Initialize session state variables."""
    if "alerts" not in st.session_state:
        st.session_state.alerts = []
    if "view" not in st.session_state:
        st.session_state.view = GenerateView(
            client,
            clipboard=FallbackClipboard(BrowserClipboard("clipboard-api"), BrowserClipboard("selection")),
            on_alert=push_alert,
            category=settings.default_category,
            page_size=settings.page_size,
            copied_seconds=settings.copied_indicator_seconds,
        )


def _bind(key: str, initial, on_change: Callable[[object], None]) -> dict:
    """Seed a widget's session value once and route edits to ``on_change``."""
    if key not in st.session_state:
        st.session_state[key] = initial
    return {"key": key, "on_change": lambda: on_change(st.session_state[key])}


# =============================================================================
# UI Components
# =============================================================================


def render_sidebar(client: TemplateAPIClient, view: GenerateView) -> None:
    """Render the sidebar with connection status and catalog filters.

    Args:
        client: The API client instance.
        view: The session's generate view.
    """
    with st.sidebar:
        st.title("🧩 PromptDesk")

        st.divider()

        # Connection status
        if client.health_check():
            st.success("✅ API Connected")
        else:
            st.error("❌ API Disconnected")
            st.info(f"API URL: {settings.api_base_url}")

        st.divider()

        st.subheader("Catalog")
        if "catalog_category" not in st.session_state:
            st.session_state.catalog_category = view.selector.category or ""
        category = st.text_input(
            "Category",
            key="catalog_category",
            help="Only show public templates in this category",
        )
        view.selector.set_category(category)

        st.divider()

        st.subheader("Workflow")
        st.markdown("""
        1. **Pick** a template from the catalog
        2. **Fill in** its variables
        3. **Generate** the prompt
        4. **Copy** the result
        """)

        st.divider()

        st.caption(f"API: `{settings.api_base_url}`")


def render_template_card(view: GenerateView, template: Template) -> None:
    """Render one catalog card with select and edit actions."""
    selector = view.selector
    with st.container(border=True):
        st.markdown(f"**{template.name}**")
        if template.description:
            st.caption(template.description)

        badges = [f"🏷️ {template.category or 'Uncategorized'}", f"Used {template.usage_count} times"]
        if template.is_public:
            badges.append("🌐 Public")
        st.caption(" · ".join(badges))

        col1, col2 = st.columns([1, 1])
        with col1:
            st.button(
                "Use template",
                key=f"select_{template.id}",
                type="primary",
                use_container_width=True,
                on_click=selector.select,
                args=(template,),
            )
        if selector.can_edit:
            with col2:
                st.button(
                    "Edit",
                    key=f"edit_{template.id}",
                    use_container_width=True,
                    on_click=selector.edit,
                    args=(template,),
                )


def render_selector(view: GenerateView) -> None:
    """Render the searchable template catalog.

    Args:
        view: The session's generate view.
    """
    selector = view.selector

    query = st.text_input(
        "Search templates",
        key="template_query",
        placeholder="Search by name or description...",
        disabled=selector.loading,
    )
    selector.set_query(query)

    with st.spinner("Loading templates..."):
        selector.ensure_loaded()

    state = selector.render_state()
    if state is SelectorState.LOADING:
        st.info("Loading templates...")
    elif state is SelectorState.ERROR:
        st.error(selector.error)
        st.button("Retry", on_click=selector.refresh)
    elif state in (SelectorState.EMPTY, SelectorState.NO_MATCH):
        st.info(selector.empty_message())
    else:
        columns = st.columns(3)
        for i, template in enumerate(selector.filtered()):
            with columns[i % 3]:
                render_template_card(view, template)


def render_variable_input(view: GenerateView, variable: TemplateVariable) -> None:
    """Render the input widget for one template variable."""
    if view.selected is None:
        return
    key = f"var_{view.selected.id}_{view.form.revision}_{variable.name}"
    label = variable.label + (" *" if variable.required else "")
    binding = _bind(key, view.form.display_value(variable), lambda v: view.set_value(variable.name, v))
    placeholder = variable.default_value or f"Enter {variable.label}..."

    kind = input_kind(variable)
    if kind == "select":
        options = ["", *SELECT_OPTIONS[variable.name]]
        if st.session_state[key] not in options:
            options.append(st.session_state[key])
        st.selectbox(
            label,
            options,
            format_func=lambda option: option or "Please select...",
            help=variable.description or None,
            **binding,
        )
    elif kind == "textarea":
        st.text_area(label, height=150, placeholder=placeholder, help=variable.description or None, **binding)
    else:
        st.text_input(label, placeholder=placeholder, help=variable.description or None, **binding)


def render_configuring(view: GenerateView) -> None:
    """Render the selected template, its variable inputs and the result.

    Args:
        view: The session's generate view.
    """
    template = view.selected
    if template is None:
        st.warning("No template selected.")
        return

    col1, col2, col3 = st.columns([1, 1, 4])
    with col1:
        st.button("← Back to templates", on_click=view.back_to_list)
    with col2:
        st.button("Edit template", on_click=view.open_edit)
    with col3:
        with st.popover("Delete"):
            st.write(f"Delete **{template.name}**? This cannot be undone.")
            st.button("Delete template", type="primary", on_click=view.delete_selected)

    left, right = st.columns([1, 2])

    with left:
        with st.container(border=True):
            st.subheader(template.name)
            if template.description:
                st.write(template.description)
            st.divider()
            st.write("**Template preview**")
            st.code(template.content, language="text", wrap_lines=True)

    with right:
        with st.container(border=True):
            st.subheader("Fill in variables")
            variables = sorted_variables(template)
            if not variables:
                st.info("This template has no variables.")
            for variable in variables:
                render_variable_input(view, variable)

            missing = view.form.missing_required(template)
            if missing:
                st.caption(f"Required: {', '.join(missing)}")

            if st.button(
                "Generating..." if view.generating else "Generate prompt",
                type="primary",
                use_container_width=True,
                disabled=view.generating,
            ):
                with st.spinner("Generating..."):
                    view.generate()

        if view.result:
            render_result(view)


@st.fragment(run_every=0.5)
def render_result(view: GenerateView) -> None:
    """Render the generated text with a copy button.

    Runs as a fragment so the copied indicator reverts on its own and the
    page's copy outcome is picked up without a full rerun.
    """
    with st.container(border=True):
        col1, col2 = st.columns([4, 1])
        with col1:
            st.subheader("Result")
        with col2:
            if view.copied:
                label = "Copied!"
            elif view.copying:
                label = "Copying..."
            else:
                label = "Copy"
            if st.button(label, key="copy_result", use_container_width=True):
                view.copy_result()
        if view.copy_error:
            st.error(view.copy_error)
        st.text(view.result)
        render_clipboard_bridge(view)


def render_editor(editor: TemplateEditor, view: GenerateView) -> None:
    """Render the create/edit form.

    Args:
        editor: The open editor.
        view: The session's generate view.
    """
    prefix = f"editor_{editor.session_id}"

    def set_field(name: str) -> Callable[[object], None]:
        return lambda value: setattr(editor, name, value)

    def set_variable_field(uid: str, name: str) -> Callable[[object], None]:
        def update(value: object) -> None:
            for index, draft in enumerate(editor.variables):
                if draft.uid == uid:
                    editor.update_variable(index, **{name: value})
        return update

    with st.container(border=True):
        col1, col2, col3 = st.columns([4, 1, 1])
        with col1:
            st.subheader("Create template" if editor.is_new else "Edit template")
        with col2:
            st.button("Cancel", use_container_width=True, on_click=view.cancel_edit)
        with col3:
            st.button(
                "Saving..." if editor.saving else "Save template",
                type="primary",
                use_container_width=True,
                disabled=editor.saving,
                on_click=editor.save,
            )

        col1, col2 = st.columns(2)
        with col1:
            st.text_input(
                "Template name",
                placeholder="Enter a template name",
                **_bind(f"{prefix}_name", editor.name, set_field("name")),
            )
        with col2:
            st.text_input(
                "Category",
                placeholder="e.g. Writing, Summaries",
                **_bind(f"{prefix}_category", editor.category, set_field("category")),
            )

        st.text_area(
            "Description",
            height=80,
            placeholder="Briefly describe what the template is for",
            **_bind(f"{prefix}_description", editor.description, set_field("description")),
        )

        st.text_area(
            "Template content",
            height=200,
            placeholder="Use {{variable_name}} to mark placeholders",
            **_bind(f"{prefix}_content", editor.content, set_field("content")),
        )

        st.checkbox(
            "Public template",
            **_bind(f"{prefix}_public", editor.is_public, set_field("is_public")),
        )

        st.divider()

        col1, col2, col3 = st.columns([4, 1, 1])
        with col1:
            st.write("**Variables**")
        with col2:
            st.button(
                "Extracting..." if editor.extracting else "Extract from content",
                use_container_width=True,
                disabled=editor.extracting or not editor.content.strip(),
                on_click=editor.extract_variables,
            )
        with col3:
            st.button("Add variable", use_container_width=True, on_click=editor.add_variable)

        if not editor.variables:
            st.caption("No variables yet. Add one or extract them from the content.")

        for index, draft in enumerate(editor.variables):
            row = f"{prefix}_var_{draft.uid}"
            with st.container(border=True):
                col1, col2, col3 = st.columns([2, 2, 1])
                with col1:
                    st.text_input(
                        "Name",
                        placeholder="snake_case_name",
                        **_bind(f"{row}_name", draft.name, set_variable_field(draft.uid, "name")),
                    )
                with col2:
                    st.text_input(
                        "Display name",
                        **_bind(f"{row}_display", draft.display_name, set_variable_field(draft.uid, "display_name")),
                    )
                with col3:
                    st.checkbox(
                        "Required",
                        **_bind(f"{row}_required", draft.required, set_variable_field(draft.uid, "required")),
                    )
                    st.button("Remove", key=f"{row}_remove", on_click=editor.remove_variable, args=(index,))

                col1, col2 = st.columns(2)
                with col1:
                    st.text_input(
                        "Default value",
                        **_bind(f"{row}_default", draft.default_value, set_variable_field(draft.uid, "default_value")),
                    )
                with col2:
                    st.text_input(
                        "Description",
                        **_bind(f"{row}_description", draft.description, set_variable_field(draft.uid, "description")),
                    )


def render_alerts() -> None:
    """Show and drop queued alerts."""
    for message in st.session_state.alerts:
        st.error(message)
    st.session_state.alerts = []


# =============================================================================
# Main App
# =============================================================================


def main() -> None:
    """Main application entry point."""
    init_logging()

    client = get_client(settings.api_base_url)
    init_session_state(client)
    view: GenerateView = st.session_state.view

    render_sidebar(client, view)

    st.title("Prompt Template Studio")

    # Filled last so alerts raised while rendering still show on this run
    alert_slot = st.container()

    if view.mode is ViewMode.EDITING and view.editor is not None:
        render_editor(view.editor, view)
    elif view.mode is ViewMode.CONFIGURING and view.selected is not None:
        render_configuring(view)
    else:
        st.markdown("Pick a template to start generating your prompt")
        col1, col2 = st.columns([4, 1])
        with col1:
            st.caption("You can also create your own templates")
        with col2:
            st.button("Create template", type="primary", use_container_width=True, on_click=view.open_create)
        render_selector(view)

    with alert_slot:
        render_alerts()


if __name__ == "__main__":
    main()
