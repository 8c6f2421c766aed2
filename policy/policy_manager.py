import asyncio
import json
import os
from typing import Any, Dict, Mapping, Optional

import aiorwlock

from configuration.config_manager import DISABLED, PassCheckConfig
from policy.assertions import LengthAssertion, NotLeakedAssertion, PolicyAssertion, Result
from policy.password_policy import PasswordPolicy
from screening.errors import InvalidConfigurationError, ScreeningError
from screening.events import EventCallback, emitter, log_event

BUILD_ERRORS = (OSError, TypeError, ValueError, ScreeningError)


def _bound(spec: Mapping[str, Any], option: str, field: str) -> Optional[int]:
    value = spec.get(option, spec.get(field))
    return None if value == DISABLED else value


def build_assertion(spec: Mapping[str, Any], base_dir: str = "",
                    on_event: Optional[EventCallback] = None) -> PolicyAssertion:
    """Creates one assertion from its JSON definition, keyed by "kind" """
    options = {key: value for key, value in spec.items() if key != "kind"}
    match spec["kind"]:
        case "length":
            unknown = set(options) - {"minLength", "min_length", "maxLength", "max_length"}
            if unknown:
                raise InvalidConfigurationError(f"Unknown length options: {sorted(unknown)}")
            return LengthAssertion(_bound(spec, "minLength", "min_length"),
                                   _bound(spec, "maxLength", "max_length"))
        case "not_leaked" | "notLeaked":
            config = PassCheckConfig.from_mapping(options)
            data_file = config.password_data_file
            if data_file is not None and base_dir and not os.path.isabs(data_file):
                config = config.with_overrides(password_data_file=os.path.join(base_dir, data_file))
            return NotLeakedAssertion.from_config(config, on_event)
        case kind:
            raise InvalidConfigurationError(f"Unknown assertion kind: {kind!r}")


def build_policy(definition: Mapping[str, Any], base_dir: str = "",
                 on_event: Optional[EventCallback] = None) -> PasswordPolicy:
    assertions = [build_assertion(spec, base_dir, on_event) for spec in definition["assertions"]]
    return PasswordPolicy(assertions, name=definition["name"])


class PolicyManager():
    """
    Registry of named password policies loaded from JSON definitions.
    Evaluations share a reader lock, registration and rebuilds take the writer lock.
    """

    def __init__(self, on_event: Optional[EventCallback] = log_event):
        self.registry: Dict[str, PasswordPolicy] = {}
        self._definitions: Dict[str, tuple] = {}
        self._lock = aiorwlock.RWLock()
        self._emit = emitter(on_event)
        self._on_event = on_event

    async def _build(self, definition: Mapping[str, Any], base_dir: str) -> PasswordPolicy:
        # word list ingestion is blocking, keep it off the event loop
        return await asyncio.to_thread(build_policy, definition, base_dir, self._on_event)

    async def register(self, json_file_path: str) -> bool:
        try:
            with open(json_file_path, 'r', encoding='utf-8') as file:
                definition = json.load(file)
            base_dir = os.path.dirname(os.path.abspath(json_file_path))
            policy = await self._build(definition, base_dir)
        except KeyError as e:
            self._emit("error", {"path": json_file_path, "error": f"Missing key: {e}"})
            return False
        except BUILD_ERRORS as e:
            self._emit("error", {"path": json_file_path, "error": str(e)})
            return False
        async with self._lock.writer_lock:
            self.registry[policy.name] = policy
            self._definitions[policy.name] = (definition, base_dir)
        self._emit("policy_registered", {"name": policy.name, "assertions": len(policy)})
        return True

    async def unregister(self, policy_name: str) -> bool:
        async with self._lock.writer_lock:
            if policy_name not in self.registry:
                return False
            del self.registry[policy_name]
            del self._definitions[policy_name]
        return True

    async def rebuild(self, policy_name: str) -> bool:
        """
        Rebuilds a registered policy from its definition, keeping the old one on failure.
        Returns False without touching the registry if the policy was unregistered
        or re-registered while the rebuild ran.
        """
        async with self._lock.reader_lock:
            entry = self._definitions[policy_name]
        definition, base_dir = entry
        try:
            policy = await self._build(definition, base_dir)
        except BUILD_ERRORS as e:
            self._emit("error", {"name": policy_name, "error": str(e)})
            return False
        async with self._lock.writer_lock:
            if self._definitions.get(policy_name) is not entry:
                return False
            self.registry[policy_name] = policy
        self._emit("policy_rebuilt", {"name": policy_name})
        return True

    async def get_policy(self, policy_name: str) -> PasswordPolicy:
        async with self._lock.reader_lock:
            return self.registry[policy_name]

    async def evaluate(self, policy_name: str, password: Optional[str]) -> Dict[PolicyAssertion, Result]:
        async with self._lock.reader_lock:
            return self.registry[policy_name].evaluate(password)

    async def get_violations(self, policy_name: str, password: Optional[str]) -> Dict[PolicyAssertion, Result]:
        return PasswordPolicy.get_violations(await self.evaluate(policy_name, password))
