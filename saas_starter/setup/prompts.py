"""Line-based prompts for the interactive setup wizard."""

from typing import Callable, Optional

from saas_starter.core.exceptions import SetupAbortedError


class Prompter:
    """Ask questions on the terminal and validate the answers.

    ``input_func`` and ``output_func`` default to the builtins and are swapped
    for scripted fakes in tests. Validation loops never give up on their own.
    """

    def __init__(
        self,
        input_func: Callable[[str], str] = input,
        output_func: Callable[..., None] = print,
    ):
        self._input = input_func
        self._output = output_func

    def ask(self, prompt: str) -> str:
        """Read one trimmed line."""
        try:
            return self._input(prompt).strip()
        except (EOFError, KeyboardInterrupt):
            raise SetupAbortedError("Input closed before setup finished.")

    def ask_until(
        self,
        prompt: str,
        predicate: Callable[[str], bool],
        error_message: str,
    ) -> str:
        """Repeat the question until ``predicate`` accepts the answer."""
        while True:
            answer = self.ask(prompt)
            if predicate(answer):
                return answer
            self._output(error_message)

    def ask_required(
        self,
        prompt: str,
        error_message: str,
        default: Optional[str] = None,
    ) -> str:
        """Repeat the question until a non-empty answer (or default) is available."""
        while True:
            answer = self.ask(prompt) or (default or "")
            if answer:
                return answer
            self._output(error_message)

    def ask_with_default(self, prompt: str, default: str) -> str:
        """Empty input maps to ``default``."""
        return self.ask(prompt) or default

    def confirm(self, prompt: str) -> bool:
        """Yes/no question; only ``y`` (any case) counts as yes."""
        return self.ask(prompt).lower() == "y"
