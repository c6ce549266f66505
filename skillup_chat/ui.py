# Run from project root: streamlit run skillup_chat/ui.py
# Chat widget: sends {message} to POST /api/chat and renders {reply}. No history is sent to the server.

import os
import sys
from pathlib import Path

# Ensure project root is on path (Streamlit may run with cwd != project root)
_root_from_file = Path(__file__).resolve().parent.parent
_cwd = os.getcwd()
for _root in (_root_from_file, _cwd):
    _root = str(_root)
    if _root not in sys.path:
        sys.path.insert(0, _root)

import streamlit as st

from skillup_chat.core.config import API_BASE
from skillup_chat.ui_client import GREETING, TYPING_PLACEHOLDER, send_message

st.title("AI Assistant")
st.caption(f"Backend: {API_BASE}")

if "messages" not in st.session_state:
    st.session_state.messages = [{"role": "assistant", "content": GREETING}]

if st.button("New chat", key="new_chat"):
    st.session_state.messages = [{"role": "assistant", "content": GREETING}]
    st.rerun()

for msg in st.session_state.messages:
    with st.chat_message(msg["role"]):
        st.markdown(msg["content"])

# Show the pending question, a transient "Typing..." line, then swap in the reply
if st.session_state.get("pending_message"):
    prompt = st.session_state.pending_message
    with st.chat_message("assistant"):
        placeholder = st.empty()
        placeholder.caption(TYPING_PLACEHOLDER)
        reply = send_message(prompt)
        placeholder.markdown(reply)
    st.session_state.messages.append({"role": "assistant", "content": reply})
    del st.session_state["pending_message"]
    st.rerun()

if prompt := st.chat_input("Type your message..."):
    if prompt.strip():
        st.session_state.messages.append({"role": "user", "content": prompt})
        st.session_state.pending_message = prompt
        st.rerun()
