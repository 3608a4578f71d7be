"""
Sample types built from configuration in the test-suite.
"""

import collections.abc
import enum
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, ClassVar, Dict, List, Optional, Protocol, Set, Tuple

from objectfactory import constructor, event


def type_ref(cls: type) -> str:
    """The string a ``type`` configuration key uses to name ``cls``."""
    return f"{cls.__module__}.{cls.__qualname__}"


class Widget:
    def __init__(self, size: int, label: str = "x"):
        self.size = size
        self.label = label


class StrictWidget:
    def __init__(self, size: int):
        self.size = size


class NoArgs:
    def __init__(self):
        self.created = True


class Endpoint:
    def __init__(self, host: str, port: int = 80):
        self.host = host
        self.port = port
        self.source = "init"

    @constructor
    def from_url(cls, url: str) -> "Endpoint":
        host, _, port = url.partition(":")
        endpoint = cls(host, int(port or 80))
        endpoint.source = "from_url"
        return endpoint


class Coordinates:
    def __init__(self, x: int, y: int, /, label: str = ""):
        self.x = x
        self.y = y
        self.label = label


class Dual:
    """Two constructors that score identically for the same keys."""

    def __init__(self, width: int = 1):
        self.width = width
        self.source = "init"

    @constructor
    def doubled(cls, width: int = 1) -> "Dual":
        dual = cls(width * 2)
        dual.source = "doubled"
        return dual


class Multi:
    def __init__(self):
        self.source = "init"
        self.a = 0
        self.b = 0

    @constructor
    def full(cls, a: int = 0, b: int = 0) -> "Multi":
        multi = cls()
        multi.source = "full"
        multi.a = a
        multi.b = b
        return multi


class Level(enum.Enum):
    DEBUG = 10
    INFO = 20
    ERROR = 40


class Settings:
    timeout: float = 1.0
    level: Level = Level.INFO
    owner: Optional[str] = None

    def __init__(self):
        self._tags: List[str] = []
        self._labels: Dict[str, str] = {}
        self._ports: Set[int] = set()
        self._name = ""

    @property
    def tags(self) -> List[str]:
        return self._tags

    @property
    def labels(self) -> Dict[str, str]:
        return self._labels

    @property
    def ports(self) -> Set[int]:
        return self._ports

    @property
    def name(self) -> str:
        return self._name

    @name.setter
    def name(self, value: str) -> None:
        self._name = value

    @property
    def description(self) -> str:
        return f"{self._name} ({len(self._tags)} tags)"


class Bucket:
    """A read-only collection property that a constructor parameter also names."""

    def __init__(self, items: Optional[List[str]] = None):
        self._items = list(items or [])

    @property
    def items(self) -> List[str]:
        return self._items


@dataclass
class Point:
    x: int
    y: int = 0


@dataclass(frozen=True)
class FrozenPoint:
    x: int
    y: int = 0


class Pool:
    def __init__(self, hosts: List[str], ports: Dict[str, int], weights: Tuple[int, ...] = (),
                 pair: Optional[Tuple[str, int]] = None):
        self.hosts = hosts
        self.ports = ports
        self.weights = weights
        self.pair = pair


class RetryPolicy(ABC):
    @abstractmethod
    def delay(self, attempt: int) -> float:
        pass


class FixedRetry(RetryPolicy):
    def __init__(self, seconds: float = 1.0):
        self.seconds = seconds

    def delay(self, attempt: int) -> float:
        return self.seconds


class ExponentialRetry(RetryPolicy):
    def __init__(self, base: float, factor: float = 2.0):
        self.base = base
        self.factor = factor

    def delay(self, attempt: int) -> float:
        return self.base * self.factor ** attempt


class Client:
    def __init__(self, endpoint: str, retry: RetryPolicy, timeout: float = 5.0):
        self.endpoint = endpoint
        self.retry = retry
        self.timeout = timeout


class Clock(Protocol):
    def now(self) -> str:
        ...


class FixedClock:
    def __init__(self, value: str = "12:00"):
        self.value = value

    def now(self) -> str:
        return self.value


class Scheduler:
    def __init__(self, clock: Clock, name: str = "scheduler"):
        self.clock = clock
        self.name = name


class Exploding:
    def __init__(self, fail: bool = True):
        if fail:
            raise RuntimeError("boom")


class Greeter(ABC):
    greeted = event()

    formatter: Optional[Callable[[str], str]]
    retries: int

    @abstractmethod
    def greet(self) -> str:
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        pass


class ConfiguredGreeter(Greeter):
    instances: ClassVar[List["ConfiguredGreeter"]] = []

    def __init__(self, name: str, retries: int = 0):
        self._name = name
        self.retries = retries
        self.formatter = None
        self.closed = False
        ConfiguredGreeter.instances.append(self)

    @property
    def name(self) -> str:
        return self._name

    def greet(self) -> str:
        text = f"Hello, {self._name}"
        if self.formatter is not None:
            text = self.formatter(text)
        self.greeted.fire(self, text)
        return text

    def close(self) -> None:
        self.closed = True


class PresetGreeter(ConfiguredGreeter):
    """Sets its own formatter, which a reload must not overwrite."""

    def __init__(self, name: str, retries: int = 0):
        super().__init__(name, retries)
        self.formatter = str.upper


class FaultyCloseGreeter(ConfiguredGreeter):
    def close(self) -> None:
        raise RuntimeError("close failed")


class Salutation(Protocol):
    def salute(self) -> str:
        ...


class FormalSalutation:
    def __init__(self, title: str = "Sir"):
        self.title = title

    def salute(self) -> str:
        return f"Good day, {self.title}"


class Host:
    """Declares a nested, independently reloading member."""

    def __init__(self, greeter: Greeter, port: int = 8080):
        self.greeter = greeter
        self.port = port


class Service(ABC):
    @abstractmethod
    def describe(self) -> str:
        pass


class GreeterService(Service):
    """Owns a nested greeter, which reloads on its own when marked so."""

    def __init__(self, greeter: Greeter, port: int = 8080):
        self.greeter = greeter
        self.port = port

    def describe(self) -> str:
        return f"{self.greeter.greet()} on {self.port}"


class ItemSource(collections.abc.Iterable):
    @abstractmethod
    def __iter__(self):
        pass


class SelfReloading(ABC):
    @abstractmethod
    def reload(self) -> None:
        pass
