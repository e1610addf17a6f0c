"""ClientSideApply — a component that runs a command on the client.

The component emits a reserved local-execution manifest. At apply time that
manifest becomes a bundle of its own and is executed by the action
dispatcher instead of being sent to the cluster::

    Plan(
        "bootstrap",
        component_set(
            client_side_apply("kind", "create", "cluster", "--name", "demo"),
            client_side_apply("cmd", "echo", "done", on_failure="continue"),
        ),
    )
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel, Field

from plansmith.core.constructs import ApiObject, Chart, Construct
from plansmith.core.context import ApplyContext
from plansmith.core.errors import ConstructError
from plansmith.core.identity import RESOURCE, resource_id
from plansmith.manifests.models import API_VERSION, CLIENT_SIDE_APPLY, Action, ClientSideApplySpec, OnFailure

if TYPE_CHECKING:
    from plansmith.core.plan import ComponentFunc

COMPONENT_PREFIX = "sdk.ClientSideApply"


class ClientSideApplyProps(BaseModel):
    """Inputs for one client-side action."""

    namespace: str | None = Field(default=None, max_length=63)
    on_failure: OnFailure = OnFailure.ABORT
    action: Action
    args: list[str] = Field(min_length=1)


class ClientSideApplyResult(Chart):
    """The chart holding a client-side action, with its props exposed."""

    def __init__(self, scope: Construct, id: str, props: ClientSideApplyProps) -> None:
        super().__init__(scope, id)
        self.props = props

    @property
    def spec(self) -> ClientSideApplySpec:
        return ClientSideApplySpec(on_failure=self.props.on_failure, action=self.props.action, args=self.props.args)

    @property
    def args(self) -> list[str]:
        """The full command line: action followed by its arguments."""
        return [self.props.action.value, *self.props.args]


def new_client_side_apply(scope: Construct, props: ClientSideApplyProps) -> ClientSideApplyResult:
    chart = ClientSideApplyResult(scope, resource_id(COMPONENT_PREFIX, props), props)
    metadata = {"namespace": props.namespace} if props.namespace else {}
    ApiObject(
        chart,
        RESOURCE,
        api_version=API_VERSION,
        kind=CLIENT_SIDE_APPLY,
        metadata=metadata,
        spec=chart.spec.model_dump(mode="json", by_alias=True),
    )
    return chart


def client_side_apply(
    action: Action | str,
    *args: str,
    on_failure: OnFailure | str = OnFailure.ABORT,
    namespace: str | None = None,
) -> ComponentFunc:
    """Return a component function running *action* with *args* on the client.

    Props are validated when the component runs, so invalid declarations
    surface together with other construction failures.
    """

    def component(ctx: ApplyContext) -> ClientSideApplyResult:
        props = ClientSideApplyProps.model_validate(
            {"action": action, "args": list(args), "on_failure": on_failure, "namespace": namespace}
        )
        if ctx.scope is None:
            raise ConstructError(f"{COMPONENT_PREFIX} requires a construct scope")
        return new_client_side_apply(ctx.scope, props)

    return component


class ClientSideApply:
    """Composite form of :func:`client_side_apply`."""

    produces = ClientSideApplyResult
    consumes = (ApplyContext,)

    def __init__(
        self,
        action: Action | str,
        *args: str,
        on_failure: OnFailure | str = OnFailure.ABORT,
        namespace: str | None = None,
    ) -> None:
        self.props = ClientSideApplyProps.model_validate(
            {"action": action, "args": list(args), "on_failure": on_failure, "namespace": namespace}
        )

    def __str__(self) -> str:
        return COMPONENT_PREFIX

    def apply(self, ctx: ApplyContext) -> ClientSideApplyResult:
        if ctx.scope is None:
            raise ConstructError(f"{COMPONENT_PREFIX} requires a construct scope")
        return new_client_side_apply(ctx.scope, self.props)
