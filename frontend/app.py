import datetime
from typing import Optional

import streamlit as st

from config.settings import settings
from frontend.api import (
    BackendError,
    call_edit,
    call_gallery,
    call_generate,
    call_storyboard,
    data_uri_to_bytes,
    generate_video,
)
from frontend.panels import (
    DEFAULT_STORYBOARD_CONCEPT,
    DEFAULT_VIDEO_PROMPT,
    PanelState,
    can_submit,
    read_source_image,
    require_key,
    reset_on_change,
    run_action,
)


def panel(name: str) -> PanelState:
    key = f"panel_{name}"
    if key not in st.session_state:
        st.session_state[key] = PanelState()
    return st.session_state[key]


# ==========================
# Storyboard
# ==========================
def storyboard_section(api_key: Optional[str]) -> None:
    state = panel("storyboard")
    st.header("Storyboard Ads")
    st.caption("Generate a sequence of cinematic frames for your video ad concepts using Nano Banana.")

    concept = st.text_input(
        "Ad concept",
        value=DEFAULT_STORYBOARD_CONCEPT,
        disabled=state.busy,
        key="storyboard_concept",
    )
    clicked = st.button(
        "Generate Storyboard",
        disabled=not can_submit(state, concept),
        key="storyboard_submit",
    )
    if clicked and require_key(state, api_key):
        with st.spinner("Drawing storyboard frames... Generating 3 high-quality scenes."):
            run_action(state, lambda: call_storyboard(concept, api_key), "Failed to generate storyboard")

    if state.error:
        st.error(state.error)
    if state.result:
        cols = st.columns(len(state.result))
        for idx, (col, frame) in enumerate(zip(cols, state.result)):
            with col:
                st.image(data_uri_to_bytes(frame), caption=f"Scene {idx + 1}", use_container_width=True)
    elif not state.busy:
        st.info("No storyboard generated yet")


# ==========================
# Gallery
# ==========================
def gallery_section(api_key: Optional[str]) -> None:
    state = panel("gallery")
    st.header("Campaign Gallery")
    st.caption("Sample promotional images generated with Nano Banana.")

    if st.button("Generate Samples", disabled=state.busy, key="gallery_submit"):
        if require_key(state, api_key):
            with st.spinner("Generating..."):
                run_action(state, lambda: call_gallery(api_key), "Failed to generate sample images")

    if state.error:
        st.error(state.error)

    cols = st.columns(3)
    images = (state.result or {}).get("images", [])
    captions = (state.result or {}).get("prompts", [])
    for idx, col in enumerate(cols):
        with col:
            if idx < len(images):
                caption = captions[idx] if idx < len(captions) else None
                st.image(data_uri_to_bytes(images[idx]), caption=caption, use_container_width=True)
            else:
                st.caption("Empty Slot")


# ==========================
# Studio (generate / edit)
# ==========================
def studio_section(api_key: Optional[str]) -> None:
    state = panel("studio")
    st.header("Nano Studio")
    st.caption("Create or edit images using text prompts.")

    mode = st.radio("Mode", ["Generate New", "Edit Existing"], horizontal=True, key="studio_mode")
    reset_on_change(state, st.session_state, "studio_last_mode", mode)
    editing = mode == "Edit Existing"

    source = None
    if editing:
        uploaded = st.file_uploader(
            "Source Image",
            type=["png", "jpg", "jpeg", "webp"],
            key="studio_source",
        )
        reset_on_change(
            state, st.session_state, "studio_last_upload", uploaded.file_id if uploaded else None
        )
        if uploaded is not None:
            try:
                source = read_source_image(uploaded.getvalue())
                st.image(uploaded.getvalue(), caption="Source", use_container_width=True)
            except BackendError as e:
                st.error(str(e))

    prompt = st.text_area(
        "Edit Instructions" if editing else "Prompt",
        placeholder=(
            "Add a retro filter, remove the background..."
            if editing
            else "A futuristic smartphone with a holographic display..."
        ),
        key="studio_prompt",
    )

    disabled = not can_submit(state, prompt, editing, source)
    label = "Apply Edit" if editing else "Generate Image"
    if st.button(label, disabled=disabled, use_container_width=True, key="studio_submit"):
        if require_key(state, api_key):
            if editing:
                image_b64, mime_type = source
                action = lambda: call_edit(prompt, image_b64, mime_type, api_key)  # noqa: E731
            else:
                action = lambda: call_generate(prompt, api_key)  # noqa: E731
            with st.spinner("Creating magic..."):
                run_action(state, action, "Failed to process image")

    if state.error:
        st.error(state.error)
    if state.result:
        img_bytes = data_uri_to_bytes(state.result)
        st.image(img_bytes, caption="Result", use_container_width=True)
        ts = datetime.datetime.now().strftime("%Y%m%d_%H%M%S")
        st.download_button(
            "Save",
            data=img_bytes,
            file_name="nano-banana-result.png",
            mime="image/png",
            key=f"studio_download_{ts}",
        )
    elif not state.busy:
        st.caption("Your image will appear here")


# ==========================
# Video
# ==========================
def video_section(api_key: Optional[str]) -> None:
    state = panel("video")
    st.header("Next-Gen Mobile Ads")
    st.caption("Generate cinematic video advertisements for your products using Veo 3.1.")

    prompt = st.text_input(
        "Video prompt",
        value=DEFAULT_VIDEO_PROMPT,
        disabled=state.busy,
        key="video_prompt",
    )
    if st.button("Generate Video", disabled=not can_submit(state, prompt), key="video_submit"):
        if require_key(state, api_key):
            with st.spinner("Generating your video... This usually takes a few minutes. Hang tight!"):
                run_action(state, lambda: generate_video(prompt, api_key), "Failed to generate video")

    if state.error:
        st.error(state.error)
    if state.result:
        st.video(state.result, format="video/mp4", loop=True, autoplay=True)
    elif not state.busy:
        st.info("No video generated yet")


def main() -> None:
    st.set_page_config(page_title="NanoBanana Studio", page_icon="🍌", layout="wide")
    st.title("🍌 NanoBanana Studio")

    with st.sidebar:
        st.header("Settings")
        typed_key = st.text_input(
            "Gemini API Key",
            type="password",
            help="Leave empty to use GEMINI_API_KEY from the server configuration.",
        )
        api_key = typed_key.strip() or settings.GEMINI_API_KEY
        st.markdown("---")
        st.write("Backend:", settings.BACKEND_URL)

    tabs = st.tabs(["Storyboard Ad", "Gallery", "Studio", "Video"])
    with tabs[0]:
        storyboard_section(api_key)
    with tabs[1]:
        gallery_section(api_key)
    with tabs[2]:
        studio_section(api_key)
    with tabs[3]:
        video_section(api_key)

    st.caption("Powered by Gemini 2.5 Flash Image")


if __name__ == "__main__":
    main()
