# Interactive menu that collects key requests and hands them to the lifecycle manager.
from __future__ import annotations

from datetime import datetime
from typing import Callable, Optional, Sequence, TypeVar

import typer

from .models import (
    DEFAULT_VALIDITY_DAYS,
    Algorithm,
    BatchFailure,
    BatchReport,
    GenerationResult,
    KeyRequest,
    SigningMode,
)
from .services.expiry import capture_base
from .services.key_lifecycle import KeyLifecycleManager
from .utils.errors import ValidationError
from .utils.validation import ensure_alias, parse_positive_int

T = TypeVar("T")

MENU = ("Key Management System", "1. Generate Keys", "2. Exit")
INVALID_OPTION = "Invalid option. Please select again."


class InteractionShell:
    """Prompt-driven front end; owns no state beyond the current menu loop.

    ``prompt`` and ``echo`` default to Typer's, and can be swapped for
    scripted callables.
    """

    def __init__(
        self,
        manager: KeyLifecycleManager,
        prompt: Callable[..., str] = typer.prompt,
        echo: Callable[..., None] = typer.echo,
        default_days: int = DEFAULT_VALIDITY_DAYS,
    ) -> None:
        self.manager = manager
        self.prompt = prompt
        self.echo = echo
        self.default_days = default_days

    # ----- Menu -----
    def run(self) -> None:
        while True:
            for line in MENU:
                self.echo(line)
            choice = self.prompt("Select an option", default=None).strip()
            if choice == "1":
                self.generate_keys()
            elif choice == "2":
                self.echo("Exiting...")
                return
            else:
                self.echo(INVALID_OPTION)

    def generate_keys(self, base: Optional[datetime] = None) -> BatchReport:
        base = base or capture_base()
        self.echo(f"Current date: {base:%Y-%m-%d}")
        count = self._ask_number("Enter the number of keys to generate")
        report = self.manager.generate_batch(
            count,
            self.collect_request,
            base=base,
            on_result=self._report_result,
            on_failure=self._report_failure,
        )
        if report.aborted:
            self.echo("Key generation stopped after a failure.", err=True)
        self.echo(
            "Key generation and expiry assignment completed. "
            f"Check {self.manager.paths.registry.name} for details."
        )
        return report

    # ----- Request collection -----
    def collect_request(self, index: int) -> KeyRequest:
        self.echo(f"Generating Key {index}")
        alias = self._ask_alias(index)
        algorithm = self._select("Select encryption method", list(Algorithm), lambda a: a.value)
        key_size = self._select(
            f"Select {algorithm.value} key size in bits", list(algorithm.key_sizes), str
        )
        signing = SigningMode.self_signed()
        if self._select("Select signing option", ["CA", "Self-Signed"], str) == "CA":
            signing = self._ask_ca_paths()
        days = self._ask_number(
            f"Enter the number of days for the key validity (default is {self.default_days} days)",
            default=str(self.default_days),
        )
        if self.manager.exists(alias):
            self.echo(f"Key with alias '{alias}' already exists. It will be replaced.")
        return KeyRequest(
            alias=alias, algorithm=algorithm, key_size=key_size, signing=signing, validity_days=days
        )

    def _ask_alias(self, index: int) -> str:
        while True:
            raw = self.prompt(
                f"Enter the alias for the key (default is key_{index})", default=f"key_{index}"
            )
            try:
                return ensure_alias(raw)
            except ValidationError as exc:
                self.echo(str(exc))

    def _ask_ca_paths(self) -> SigningMode:
        cert = self.prompt(
            "Enter the path to the CA certificate file (leave blank for self-signing)", default=""
        ).strip()
        if not cert:
            return SigningMode.self_signed()
        key = ""
        while not key:
            key = self.prompt("Enter the path to the CA key file", default=None).strip()
        return SigningMode.ca_signed(cert, key)

    def _ask_number(self, text: str, default: Optional[str] = None) -> int:
        while True:
            raw = self.prompt(text, default=default)
            try:
                return parse_positive_int(str(raw))
            except ValidationError:
                self.echo("Invalid input. Please enter a valid number.")

    def _select(self, text: str, options: Sequence[T], label: Callable[[T], str]) -> T:
        while True:
            for number, option in enumerate(options, start=1):
                self.echo(f"{number}) {label(option)}")
            raw = str(self.prompt(text, default=None)).strip()
            if raw.isdigit() and 1 <= int(raw) <= len(options):
                return options[int(raw) - 1]
            self.echo(INVALID_OPTION)

    # ----- Reporting -----
    def _report_result(self, index: int, result: GenerationResult) -> None:
        self.echo(
            f"Key {index} generated with alias '{result.alias}', "
            f"expiry date '{result.expiry_date:%Y-%m-%d}', and size {result.size_bytes} bytes"
        )

    def _report_failure(self, failure: BatchFailure) -> None:
        who = f" ('{failure.alias}')" if failure.alias else ""
        self.echo(f"Key {failure.index}{who} failed: {failure.error}", err=True)


__all__ = ["InteractionShell"]
