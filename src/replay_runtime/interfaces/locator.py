"""
Locator Interface - Structured locator descriptors and the factory contract.

A recorded step carries several candidate descriptors for the same logical
target. Each descriptor is a tagged variant (``kind`` plus arguments) that a
locator factory turns into a lazy, live locator. Descriptors are plain data:
nothing in them is ever evaluated as code.

Example:
    >>> candidates = [
    ...     LocatorDescriptor.role("button", name="Save"),
    ...     LocatorDescriptor.css("form.editor button[type=submit]"),
    ...     LocatorDescriptor.xpath("//html[1]/body[1]/div[1]/form[1]/button[1]"),
    ... ]
    >>> locator = factory.create(candidates[0])
    >>> await locator.count()
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class LocatorKind(str, Enum):
    """Supported locator strategies."""
    ROLE = "role"
    CSS = "css"
    XPATH = "xpath"
    TEXT = "text"
    TEST_ID = "test_id"
    LABEL = "label"
    PLACEHOLDER = "placeholder"
    ALT_TEXT = "alt_text"
    TITLE = "title"


class LocatorDescriptor(BaseModel):
    """
    One recorded candidate locator.
    
    Attributes:
        kind: Locator strategy
        value: Primary argument (role name, CSS/XPath expression, text, ...)
        options: Strategy-specific keyword options (e.g. ``name``, ``exact``)
        parent: Optional scope; the descriptor is evaluated inside its parent
    """
    kind: LocatorKind
    value: str = Field(min_length=1)
    options: Dict[str, Any] = Field(default_factory=dict)
    parent: Optional["LocatorDescriptor"] = None
    
    model_config = ConfigDict(frozen=True, extra="forbid")
    
    @field_validator("options", mode="before")
    @classmethod
    def _none_options(cls, v: Any) -> Any:
        return {} if v is None else v
    
    @classmethod
    def css(cls, selector: str, parent: Optional["LocatorDescriptor"] = None) -> "LocatorDescriptor":
        return cls(kind=LocatorKind.CSS, value=selector, parent=parent)
    
    @classmethod
    def xpath(cls, expression: str, parent: Optional["LocatorDescriptor"] = None) -> "LocatorDescriptor":
        return cls(kind=LocatorKind.XPATH, value=expression, parent=parent)
    
    @classmethod
    def role(cls, role: str, **options: Any) -> "LocatorDescriptor":
        return cls(kind=LocatorKind.ROLE, value=role, options=options)
    
    @classmethod
    def text(cls, text: str, exact: Optional[bool] = None) -> "LocatorDescriptor":
        options = {"exact": exact} if exact is not None else {}
        return cls(kind=LocatorKind.TEXT, value=text, options=options)
    
    @classmethod
    def test_id(cls, test_id: str) -> "LocatorDescriptor":
        return cls(kind=LocatorKind.TEST_ID, value=test_id)
    
    def describe(self) -> str:
        """Short human-readable form for logs and error details."""
        if self.options:
            opts = ", ".join(f"{k}={v!r}" for k, v in self.options.items())
            own = f"{self.kind.value}({self.value!r}, {opts})"
        else:
            own = f"{self.kind.value}({self.value!r})"
        if self.parent is not None:
            return f"{self.parent.describe()} >> {own}"
        return own


LocatorDescriptor.model_rebuild()


class ILocator(ABC):
    """
    A lazy locator for zero or more live elements.
    
    Nothing is looked up until one of the async methods is awaited, so the
    same locator can be counted again after the page changes.
    """
    
    @abstractmethod
    async def wait_attached(self, timeout_ms: int) -> None:
        """
        Wait until at least one match is attached to the DOM.
        
        Raises:
            Any transport/browser error, including a timeout
        """
        ...
    
    @abstractmethod
    async def count(self) -> int:
        """Count current matches."""
        ...
    
    @abstractmethod
    def first(self) -> "ILocator":
        """Get a locator narrowed to the first match."""
        ...
    
    @abstractmethod
    async def outer_html(self) -> str:
        """Get the outer HTML of the (first) matched element."""
        ...


class ILocatorFactory(ABC):
    """Turns locator descriptors into live locators."""
    
    @abstractmethod
    def create(self, descriptor: LocatorDescriptor) -> ILocator:
        """
        Create a lazy locator for a descriptor.
        
        Args:
            descriptor: The candidate to instantiate
            
        Returns:
            A locator bound to the current page
        """
        ...
