from __future__ import annotations

import streamlit as st

from patientchat.matcher import best_match, score, tokenize
from patientchat.ui_state import ensure_coordinator


st.set_page_config(page_title="Q&A Explorer", page_icon="🔎", layout="wide")
st.title("Q&A Explorer")
st.caption("Try a question against each panel's canned answers and see how every stored question scores.")

# shared with the main page; built here if this page is opened first
coordinator = ensure_coordinator(st.session_state)

sb = st.sidebar
sb.title("Explorer – Controls")
labels = {p.id: p.profile.name for p in coordinator.panels}
panel_id = sb.radio("Panel", list(labels), format_func=lambda pid: labels[pid])
show_zero = sb.checkbox("Show zero scores", value=False)

panel = coordinator.panel(panel_id)
query = st.text_input("Question", value=panel.profile.example)

query_tokens = tokenize(query)
st.caption(f"tokens: {', '.join(sorted(query_tokens)) or '—'}")

result = best_match(query, panel.qa_table)
with st.chat_message("assistant"):
    if result is None:
        st.markdown(f"_default reply_\n\n{panel.default_response}")
    else:
        st.markdown(f"_matched_ `{result.key}` _(score {result.score})_\n\n{result.answer}")

rows = []
for key, key_tokens in panel.qa_table.keyed_tokens():
    s = score(query_tokens, key_tokens)
    if s or show_zero:
        rows.append({"question": key, "score": s, "shared": ", ".join(sorted(query_tokens & key_tokens))})
rows.sort(key=lambda r: r["score"], reverse=True)

st.subheader(f"Stored questions ({len(panel.qa_table)})")
if rows:
    st.dataframe(rows, hide_index=True)
else:
    st.info("No stored question shares a word with this query.")
