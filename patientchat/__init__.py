"""
Two-panel patient chat demo with canned answers.

Modules:
- matcher: tokenizer, QATable and the shared-word matcher
- session: ConversationSession state machine (idle / awaiting reply)
- panels: Panel and PanelCoordinator (two isolated panels)
- scheduler: delayed-delivery schedulers and ReplyDelay
- qa_loader: Q&A document loading with empty-list fallback
- profiles: the static patient profiles
- states: SessionState/Role enums, Message, QAEntry, SessionMetrics
- config: environment settings and logging setup
- ui_state: session-state helpers for the Streamlit pages
"""
