"""Relation commands -- look up and link related records.

Provides the ``onoffice relations`` sub-command group. Relation types are
given by a short name such as ``owner`` or ``contact-broker``, or by the
full ``urn:onoffice-de-ns:...`` identifier.
"""

from __future__ import annotations

from typing import Optional

import typer

from onoffice.commands.runtime import parse_relation_type, run_with_client
from onoffice.output import error, get_output, success


relations_app = typer.Typer(no_args_is_help=True)


@relations_app.command("get")
def relations_get(
    ctx: typer.Context,
    relation_type: str = typer.Option(..., "--type", "-t", help="Relation type, e.g. 'owner'."),
    parent_id: Optional[list[str]] = typer.Option(
        None, "--parent-id", help="Parent record id (repeatable)."
    ),
    child_id: Optional[list[str]] = typer.Option(
        None, "--child-id", help="Child record id (repeatable)."
    ),
) -> None:
    """Show the ids related to the given parents or children.

    Example::

        onoffice relations get --type owner --parent-id 42
    """
    from onoffice.models import RelationshipQuery

    if not parent_id and not child_id:
        error("Give at least one --parent-id or --child-id")
        raise typer.Exit(code=2)

    query = RelationshipQuery(
        relationtype=parse_relation_type(relation_type),
        parentids=parent_id or None,
        childids=child_id or None,
    )
    payload = run_with_client(ctx, lambda client: client.get_relationships(query))
    get_output().print_payload(payload)


@relations_app.command("create")
def relations_create(
    ctx: typer.Context,
    relation_type: str = typer.Option(..., "--type", "-t", help="Relation type, e.g. 'owner'."),
    parent_id: str = typer.Option(..., "--parent-id", help="Parent record id."),
    child_id: str = typer.Option(..., "--child-id", help="Child record id."),
) -> None:
    """Link a child record to a parent record.

    Example::

        onoffice relations create --type buyer --parent-id 42 --child-id 7
    """
    from onoffice.models import Relationship

    relationship = Relationship(
        relationtype=parse_relation_type(relation_type),
        parentid=parent_id,
        childid=child_id,
    )
    run_with_client(ctx, lambda client: client.create_relationship(relationship))
    success(f"Linked {child_id} to {parent_id} ({relationship.relationtype.name.lower()})")
