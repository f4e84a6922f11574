"""
Branch selection for if/unless tags.

A block holds its branches as conditions whose attachments are the bodies
to render. Rendering the chosen body is up to the caller.
"""

from typing import Any, List, Optional, Union
import logging

from .conditions import Condition, ElseCondition
from .errors import ConditionSyntaxError
from .models import Context, is_truthy
from .parser import parse_condition

logger = logging.getLogger(__name__)


class ConditionalBlock:
    """An if/elsif/else (or unless/elsif/else) tag's branches."""

    KINDS = ("if", "unless")

    def __init__(self, kind: str = "if"):
        if kind not in self.KINDS:
            raise ValueError(f"Unknown block kind '{kind}', expected one of {self.KINDS}")
        self.kind = kind
        self.branches: List[Condition] = []

    def add_branch(self, condition: Union[Condition, str], body: Any) -> Condition:
        """Append a branch; markup strings are parsed first."""
        if isinstance(condition, str):
            condition = parse_condition(condition)
        if self.branches and self.branches[-1].is_else():
            raise ConditionSyntaxError(f"'{self.kind}' block cannot have branches after else")

        condition.attach(body)
        self.branches.append(condition)
        return condition

    def add_else(self, body: Any) -> Condition:
        """Append the default branch."""
        return self.add_branch(ElseCondition(), body)

    def select(self, context: Optional[Context] = None) -> Optional[Condition]:
        """Return the first branch that holds, or None."""
        if context is None:
            context = Context()

        for index, branch in enumerate(self.branches):
            result = is_truthy(branch.evaluate(context))

            # unless negates its own condition only; elsif branches read as written
            if index == 0 and self.kind == "unless" and not branch.is_else():
                result = not result

            if result:
                logger.debug(f"{self.kind} block selected branch {index}: {branch.describe()}")
                return branch

        return None

    def selected_body(self, context: Optional[Context] = None) -> Any:
        """Attachment of the selected branch, or None."""
        branch = self.select(context)
        return branch.attachment if branch is not None else None
