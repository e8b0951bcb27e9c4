from __future__ import annotations

import json
import time

import streamlit as st

from patientchat.config import Settings
from patientchat.panels import Panel
from patientchat.profiles import PatientProfile
from patientchat.states import Role
from patientchat.ui_state import ensure_coordinator, input_key, submit_input


settings = Settings.from_env()

st.set_page_config(page_title="Patient Chat with Ava", page_icon="🩺", layout="wide")

coordinator = ensure_coordinator(st.session_state, settings)


def render_profile(profile: PatientProfile) -> None:
    top = st.columns([1, 3])
    with top[0]:
        st.image(profile.image, width=84)
    with top[1]:
        st.subheader(profile.name)
        st.caption(" • ".join(f"{label}: {value}" for label, value in profile.demographics[:3]))
    with st.expander("Profile details"):
        st.markdown("\n".join(f"- **{label}:** {value}" for label, value in profile.demographics))
        for title, items in profile.sections():
            st.markdown(f"**{title}**")
            st.markdown("\n".join(f"- {item}" for item in items))
        st.markdown(f"> {profile.example}")


def render_chat(panel: Panel) -> None:
    assistant = panel.session.assistant_name
    st.markdown(f"#### {panel.profile.first_name}'s Chat with {assistant}")
    chat_box = st.container(height=320)
    with chat_box:
        for msg in panel.history:
            if msg.role == Role.USER:
                with st.chat_message("user", avatar=panel.profile.image):
                    st.markdown(f"**{msg.sender}**\n\n{msg.text}")
            else:
                with st.chat_message("assistant"):
                    st.markdown(f"**{msg.sender}**\n\n{msg.text}")
        if panel.is_awaiting_reply:
            with st.chat_message("assistant"):
                st.markdown(f"**{assistant}**\n\n_typing..._")

    with st.form(key=f"chat_form_{panel.id}", clear_on_submit=False):
        cols = st.columns([4, 1])
        with cols[0]:
            st.text_input(
                "Question",
                placeholder="Type your question...",
                label_visibility="collapsed",
                disabled=panel.is_awaiting_reply,
                key=input_key(panel),
            )
        with cols[1]:
            st.form_submit_button(
                "Send",
                disabled=panel.is_awaiting_reply,
                on_click=submit_input,
                args=(st.session_state, panel),
            )


with st.sidebar:
    st.title("Patient Chat – Info")
    st.caption(f"Q&A source: {settings.qa_source}")
    for panel in coordinator.panels:
        m = panel.session.metrics
        st.write(f"**{panel.profile.name}**: {len(panel.qa_table)} canned answers")
        st.caption(f"questions={m.turn_count} matched={m.matched_replies} default={m.default_replies}")
    transcript = {panel.id: panel.session.transcript() for panel in coordinator.panels}
    st.download_button(
        "Download transcript",
        data=json.dumps(transcript, ensure_ascii=False, indent=2),
        file_name="patient_chat_transcript.json",
        mime="application/json",
    )

cols = st.columns(2)
for col, panel in zip(cols, coordinator.panels):
    with col:
        with st.container(border=True):
            render_profile(panel.profile)
            render_chat(panel)

# Deliver pending replies: wait for the earliest one, fire it, rerun.
schedulers = [p.session.scheduler for p in coordinator.panels if p.is_awaiting_reply]
schedulers = [s for s in schedulers if s.next_due_in() is not None]
if schedulers:
    time.sleep(min(s.next_due_in() for s in schedulers))
    for s in schedulers:
        s.run_due()
    st.rerun()
