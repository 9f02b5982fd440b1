from align.application.use_cases.conversation_turn import ConversationService, TurnResult

__all__ = ["ConversationService", "TurnResult"]
