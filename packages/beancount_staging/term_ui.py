"""Terminal prompts for the interactive review (prompt_toolkit-based).

Kept apart from the review loop so each prompt can be driven in tests through
a pipe input and a dummy output.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Any

from beancount.core import account as account_lib
from prompt_toolkit import PromptSession
from prompt_toolkit.auto_suggest import AutoSuggest, Suggestion
from prompt_toolkit.completion import WordCompleter
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.styles import Style
from prompt_toolkit.validation import ValidationError, Validator

_STYLE = Style.from_dict({"auto-suggestion": "fg:#888888"})


def _session_like(session: PromptSession | None, kb: KeyBindings) -> PromptSession:
    if session is None:
        return PromptSession(key_bindings=kb)
    return PromptSession(
        input=getattr(session, "input", None),
        output=getattr(session, "output", None),
        key_bindings=kb,
    )


def _cancel_bindings() -> KeyBindings:
    kb = KeyBindings()

    @kb.add("escape")
    def _(event) -> None:  # pragma: no cover - exercised indirectly
        event.app.exit(result=None)

    @kb.add("c-c", eager=True)
    def _(event) -> None:  # pragma: no cover - exercised indirectly
        event.app.exit(result=None)

    return kb


class _AccountSuggest(AutoSuggest):
    """Grey inline completion of the first known account with the typed prefix."""

    def __init__(self, accounts: Sequence[str]) -> None:
        self._accounts = list(accounts)

    def get_suggestion(self, buffer, document):
        text = document.text
        if not text:
            return None
        lower = text.lower()
        for acc in self._accounts:
            if acc.lower() == lower:
                return None
        for acc in self._accounts:
            if acc.lower().startswith(lower):
                remainder = acc[len(text) :]
                return Suggestion(remainder) if remainder else None
        return None


class AccountValidator(Validator):
    """Accept an empty answer (skip) or a syntactically valid account name."""

    def validate(self, document) -> None:
        text = document.text.strip()
        if text and not account_lib.is_valid(text):
            raise ValidationError(message=f"Not a valid account name: {text}")


def select_account(
    accounts: Sequence[str] | Iterable[str],
    *,
    default: str = "",
    message: str = "Account (Enter to commit • empty to skip • Esc to quit): ",
    session: PromptSession | None = None,
) -> str | None:
    """Prompt for the account that balances a staging transaction.

    Known accounts are offered through completion and inline suggestion; any
    other valid account name is accepted as typed. Returns the account, ``""``
    when the user submitted an empty answer, or ``None`` when cancelled.
    """

    words = list(accounts)
    completer = WordCompleter(words, ignore_case=True, match_middle=True, sentence=False)
    kb = _cancel_bindings()

    def _best_prefix_match(text: str) -> str | None:
        if not text:
            return None
        lower = text.lower()
        for w in words:
            wl = w.lower()
            if wl == lower:
                return None
            if wl.startswith(lower):
                return w
        return None

    @kb.add("tab", eager=True)
    def _(event) -> None:  # pragma: no cover
        b = event.app.current_buffer
        s = getattr(b, "suggestion", None)
        suggestion_text = getattr(s, "text", None)
        if not suggestion_text:
            cand = _best_prefix_match(b.document.text)
            if cand:
                suggestion_text = cand[len(b.document.text) :]
        if suggestion_text:
            b.insert_text(suggestion_text)
        elif b.complete_state is None:
            b.start_completion(select_first=True)
        else:
            b.complete_next()

    @kb.add("enter", eager=True)
    def _(event) -> None:  # pragma: no cover
        b = event.app.current_buffer
        cs = b.complete_state
        if cs is not None and cs.current_completion is not None:
            b.apply_completion(cs.current_completion)
            b.validate_and_handle()
            return
        # Headless input shows no suggestion, so compute the prefix match too.
        s = getattr(b, "suggestion", None)
        suggestion_text = getattr(s, "text", None)
        if not suggestion_text:
            cand = _best_prefix_match(b.document.text)
            if cand:
                suggestion_text = cand[len(b.document.text) :]
        if suggestion_text:
            b.insert_text(suggestion_text)
        b.validate_and_handle()

    sess = _session_like(session, kb)
    prompt_kwargs: dict[str, Any] = {
        "message": message,
        "completer": completer,
        "default": default,
        "auto_suggest": _AccountSuggest(words),
        "validator": AccountValidator(),
        "validate_while_typing": False,
        "style": _STYLE,
    }
    result = sess.prompt(**prompt_kwargs)
    if result is None:
        return None
    return result.strip()


def prompt_edit_text(
    label: str,
    *,
    initial: str | None,
    session: PromptSession | None = None,
) -> str | None:
    """Let the user edit ``initial``; ``None`` when cancelled with Esc/Ctrl+C."""

    kb = _cancel_bindings()
    sess = _session_like(session, kb)
    return sess.prompt(f"{label} (Enter to keep • Esc to cancel): ", default=initial or "")


__all__ = ["AccountValidator", "select_account", "prompt_edit_text"]
