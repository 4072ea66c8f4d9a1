"""
Registry of helpers, plugins and support (page) objects.
"""

import inspect
from typing import Any, Dict, List, Mapping, Optional, Union

from steptree.calltree.scope import RunScope, get_run_scope
from steptree.core.actor import Actor
from steptree.core.helper import Helper
from steptree.core.step import MetaStep
from steptree.error_handling.exceptions import HelperNotFoundError
from steptree.monitoring.logger import get_logger

logger = get_logger(__name__)


class PageObjectProxy:
    """
    Wraps a support object so each public method call runs in a MetaStep.

    The method is looked up on the object's class and invoked with the object
    as context, which keeps ``LoginPage.submit`` as the frame the call-tree
    builder sees.
    """

    def __init__(self, name: str, target: Any, scope: RunScope) -> None:
        self._name = name
        self._target = target
        self._scope = scope

    @property
    def target(self) -> Any:
        return self._target

    def __getattr__(self, attr_name: str) -> Any:
        value = getattr(self._target, attr_name)
        if attr_name.startswith("_") or not callable(value):
            return value

        descriptor = inspect.getattr_static(type(self._target), attr_name, None)
        unbound = inspect.isfunction(descriptor)

        def call(*args: Any) -> Any:
            meta_step = MetaStep(self._name, attr_name, scope=self._scope)
            if unbound:
                meta_step.set_context(self._target)
                return meta_step.run(descriptor, *args)
            return meta_step.run(value, *args)

        call.__name__ = attr_name
        return call

    def __repr__(self) -> str:
        return f"<PageObjectProxy {self._name} {self._target!r}>"


class Container:
    """
    Named capability providers, plugins and support objects for one run.

    Args:
        scope: Run scope shared by the actor, meta steps and printer
    """

    def __init__(self, scope: Optional[RunScope] = None) -> None:
        self.scope = scope or get_run_scope()
        self._helpers: Dict[str, Helper] = {}
        self._plugins: Dict[str, Any] = {}
        self._support: Dict[str, PageObjectProxy] = {}

    def add_helper(self, helper: Helper, name: Optional[str] = None) -> Helper:
        """Register a helper; earlier helpers win when two provide a method."""
        key = name or helper.name
        self._helpers[key] = helper
        logger.debug(f"Helper registered: {key}")
        return helper

    def add_plugin(self, name: str, plugin: Any) -> Any:
        self._plugins[name] = plugin
        logger.debug(f"Plugin registered: {name}")
        return plugin

    def add_support(self, name: str, target: Any) -> PageObjectProxy:
        """Register a support object; its method calls become meta steps."""
        proxy = PageObjectProxy(name, target, self.scope)
        self._support[name] = proxy
        logger.debug(f"Support object registered: {name}")
        return proxy

    def helpers(self) -> Mapping[str, Helper]:
        return dict(self._helpers)

    def plugins(self) -> Mapping[str, Any]:
        return dict(self._plugins)

    def support(self, name: Optional[str] = None) -> Union[PageObjectProxy, Mapping[str, PageObjectProxy]]:
        """One support object by name, or all of them when ``name`` is omitted."""
        if name is None:
            return dict(self._support)
        return self._support[name]

    def find_helper(self, method_name: str) -> Helper:
        """
        Resolve the helper that provides ``method_name``.

        Raises:
            HelperNotFoundError: No registered helper has the method
        """
        for helper in self._helpers.values():
            if helper.provides(method_name):
                return helper
        available: List[str] = list(self._helpers)
        raise HelperNotFoundError(
            f"No helper provides '{method_name}'",
            method_name=method_name,
            available_helpers=available,
        )

    def actor(self, label: str = "I") -> Actor:
        return Actor(self, label=label, scope=self.scope)
