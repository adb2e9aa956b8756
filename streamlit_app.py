"""Streamlit Web UI for text-enhancer.

Landing page with an email signup form, then a single page that enhances
pasted text and shows the validated result with its quality metrics.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os

logger = logging.getLogger(__name__)

import nest_asyncio
import streamlit as st
import streamlit.components.v1 as components
from dotenv import load_dotenv

load_dotenv()
nest_asyncio.apply()

# Streamlit Cloud: sync st.secrets → os.environ so the settings store can read them
for key in ("OPENROUTER_API_KEY", "OPENROUTER_BASE_URL"):
    if key not in os.environ:
        try:
            os.environ[key] = st.secrets[key]
        except Exception:
            pass

from pydantic import ValidationError

from text_enhancer.clients.llm_client import LLMClient
from text_enhancer.config import load_config
from text_enhancer.errors import TextEnhancerError, user_message
from text_enhancer.models.request import ENHANCEMENT_TYPES, MAX_TEXT_LENGTH, TONES, build_request
from text_enhancer.models.settings import ApiConfig
from text_enhancer.pipeline.model_catalog import MODEL_PROFILES
from text_enhancer.pipeline.orchestrator import EnhancementOrchestrator
from text_enhancer.storage.session_gate import SessionGate, extract_email, is_valid_email
from text_enhancer.storage.settings_store import SettingsStore
from text_enhancer.utils.markdown_render import render_html

# ---------------------------------------------------------------------------
# Page config
# ---------------------------------------------------------------------------

st.set_page_config(
    page_title="Text Enhancer",
    page_icon=":sparkles:",
    layout="centered",
)

config = load_config()
store = SettingsStore(config.storage.resolved_db_path)
gate = SessionGate(store, ttl_days=config.storage.session_ttl_days)


def _get_client() -> LLMClient:
    return LLMClient(
        timeout=config.llm.timeout,
        app_title=config.llm.app_title,
        referer=config.llm.referer,
    )


# ---------------------------------------------------------------------------
# Email gate
# ---------------------------------------------------------------------------


def _email_from_query() -> str | None:
    """Signup completion: the form redirects back with ?email=... or ?fields=[...]."""
    params = st.query_params
    email = params.get("email")
    if is_valid_email(email):
        return email.strip()
    raw_fields = params.get("fields")
    if raw_fields:
        try:
            return extract_email(json.loads(raw_fields))
        except (json.JSONDecodeError, AttributeError):
            logger.warning("Ignoring malformed signup fields in query string")
    return None


def _landing() -> None:
    st.markdown("## Text Enhancer")
    st.markdown(
        "Rewrite emails, posts and notes in the tone you need. "
        "Sign up with your email to get started."
    )
    form_id = config.signup.tally_form_id
    components.iframe(
        f"https://tally.so/embed/{form_id}?alignLeft=1&hideTitle=1&transparentBackground=1",
        height=420,
        scrolling=True,
    )
    with st.expander("Already signed up?"):
        email = st.text_input("Email", max_chars=254)
        if st.button("Continue"):
            if is_valid_email(email):
                gate.login(email)
                st.rerun()
            else:
                st.error("Please enter a valid email address.")


completed_email = _email_from_query()
if completed_email and not gate.is_authenticated():
    gate.login(completed_email)
    st.query_params.clear()

if not gate.is_authenticated():
    _landing()
    st.stop()

# ---------------------------------------------------------------------------
# Sidebar - API settings
# ---------------------------------------------------------------------------

with st.sidebar:
    st.title("Text Enhancer")
    st.caption(gate.current_email() or "")

    stored = store.load_raw()
    current = store.load(config.llm)
    st.subheader("API settings")
    if current is not None:
        st.caption(f"Key: {current.masked_key}")
    else:
        st.warning("No API key configured.")

    model_ids = list(MODEL_PROFILES)
    default_model = current.default_model if current else config.llm.default_model
    with st.form("api_settings"):
        api_key = st.text_input(
            "API key",
            type="password",
            help="OpenRouter (or other OpenAI-compatible) API key. Leave empty to keep the current one.",
        )
        model = st.selectbox(
            "Default model",
            model_ids,
            index=model_ids.index(default_model) if default_model in model_ids else 0,
        )
        base_url = st.text_input(
            "Base URL",
            value=stored.get("base_url") or config.llm.base_url,
        )
        saved = st.form_submit_button("Save")

    if saved:
        key_value = api_key.strip() or (current.api_key if current else "")
        try:
            store.save(ApiConfig(api_key=key_value, default_model=model, base_url=base_url.strip()))
            st.success("Settings saved.")
            st.rerun()
        except ValidationError:
            st.error("Please enter an API key and a valid base URL.")

    if current is not None and st.button("Test connection"):
        with st.spinner("Checking..."):
            ok = asyncio.run(_get_client().test_connection(current))
        if ok:
            st.success("Connected.")
        else:
            st.error("Connection failed. Check the key and base URL.")

    st.divider()
    if st.button("Sign out"):
        gate.logout()
        st.rerun()

# ---------------------------------------------------------------------------
# Enhance
# ---------------------------------------------------------------------------

if "enhancing" not in st.session_state:
    st.session_state.enhancing = False


def _start_enhancing():
    st.session_state.enhancing = True
    st.session_state.pop("enhance_result", None)
    st.session_state.pop("enhance_error", None)


st.header("Enhance text")

text = st.text_area(
    "Your text",
    height=220,
    max_chars=MAX_TEXT_LENGTH,
    placeholder="Paste the text you want to improve...",
    key="input_text",
)
st.caption(f"{len(text or '')} / {MAX_TEXT_LENGTH} characters")

col_type, col_tone = st.columns(2)
with col_type:
    enhancement_type = st.selectbox("Enhancement type", ENHANCEMENT_TYPES, key="enhancement_type")
with col_tone:
    tone = st.selectbox("Tone", ["(default)", *TONES], key="tone")

with st.expander("More options"):
    audience = st.text_input("Target audience", max_chars=200, key="audience")
    instructions = st.text_area("Additional instructions", height=80, max_chars=1000, key="instructions")

can_run = bool(text and text.strip()) and not st.session_state.enhancing
st.button(
    "Enhancing..." if st.session_state.enhancing else "Enhance",
    type="primary",
    disabled=not can_run,
    on_click=_start_enhancing,
)

if st.session_state.enhancing:
    status = st.status("Enhancing...", expanded=False)

    def on_phase(phase: str, detail: str):
        status.update(label=detail)

    try:
        request = build_request(
            text,
            enhancement_type=enhancement_type,
            tone=None if tone == "(default)" else tone,
            target_audience=audience,
            custom_instructions=instructions,
        )
        orchestrator = EnhancementOrchestrator.from_config(_get_client(), config, store)
        st.session_state["enhance_result"] = asyncio.run(
            orchestrator.enhance(request, on_phase=on_phase)
        )
    except TextEnhancerError as exc:
        logger.warning("Enhancement failed: %s", exc)
        st.session_state["enhance_error"] = user_message(exc)
    except Exception as exc:
        logger.exception("Enhancement pipeline failed")
        st.session_state["enhance_error"] = user_message(exc)
    finally:
        st.session_state.enhancing = False
    st.rerun()

# ---------------------------------------------------------------------------
# Render results from session_state (survives rerun)
# ---------------------------------------------------------------------------

if "enhance_error" in st.session_state:
    st.error(st.session_state["enhance_error"])

if "enhance_result" in st.session_state:
    result = st.session_state["enhance_result"]

    m1, m2, m3 = st.columns(3)
    m1.metric("Quality", result.quality_score)
    m2.metric("Confidence", result.confidence)
    m3.metric("Time", f"{result.processing_time_ms / 1000:.1f}s")
    st.caption(
        f"Model: {result.model_used}"
        + (" · strict retry" if result.retried else "")
        + f" · {result.original_length} → {result.enhanced_length} chars"
    )

    if result.violations:
        with st.expander("Quality warnings", expanded=result.quality_score < config.pipeline.min_score):
            for message in result.violations:
                st.markdown(f"- {message}")

    tab_rendered, tab_plain = st.tabs(["Enhanced", "Plain text"])
    with tab_rendered:
        st.markdown(render_html(result.enhanced_text), unsafe_allow_html=True)
    with tab_plain:
        st.code(result.enhanced_text, language=None, wrap_lines=True)

    st.download_button(
        label="Download .txt",
        data=result.enhanced_text.encode("utf-8"),
        file_name="enhanced.txt",
        mime="text/plain",
    )

    if result.improvements:
        st.subheader("Improvements")
        for item in result.improvements:
            st.markdown(f"- {item}")
