from typing import Dict, Iterable, Optional

from configuration.config_manager import PassCheckConfig
from policy.assertions import LengthAssertion, NotLeakedAssertion, PolicyAssertion, Result, verify
from screening.errors import ScreeningError
from screening.events import EventCallback, emitter, log_event


class PasswordPolicy():
    """
    An ordered set of assertions that must all hold for a password to comply.
    Args:
        assertions: the assertions, kept in order with duplicates (by identity) dropped
        name: label used in events and by the policy manager
    """

    def __init__(self, assertions: Iterable[PolicyAssertion], name: str = "default"):
        unique = {}
        for assertion in assertions:
            unique.setdefault(id(assertion), assertion)
        self._assertions = tuple(unique.values())
        self.name = name

    @property
    def assertions(self) -> tuple:
        return self._assertions

    def __len__(self) -> int:
        return len(self._assertions)

    def evaluate(self, password: Optional[str]) -> Dict[PolicyAssertion, Result]:
        """Verifies every assertion, in order, without stopping at the first failure"""
        return {assertion: verify(assertion, password) for assertion in self._assertions}

    @staticmethod
    def get_violations(results: Dict[PolicyAssertion, Result]) -> Dict[PolicyAssertion, Result]:
        return {assertion: result for assertion, result in results.items() if not result.success}

    def check_compliance(self, password: Optional[str]) -> bool:
        return not self.get_violations(self.evaluate(password))


def simple_policy(config: Optional[PassCheckConfig] = None,
                  on_event: Optional[EventCallback] = log_event) -> PasswordPolicy:
    """
    Eight character minimum plus a case insensitive leaked password check.
    If the word list can't be loaded the policy is built without that check.
    """
    if config is None:
        config = PassCheckConfig(false_positive_probability=0.001, ignore_case=True)
    assertions = [LengthAssertion(8, None)]
    try:
        assertions.append(NotLeakedAssertion.from_config(config, on_event))
    except ScreeningError as e:
        emitter(on_event)("error", {"error": f"Failed to build NotLeakedAssertion:\n{e}"})
    return PasswordPolicy(assertions, name="simple")
