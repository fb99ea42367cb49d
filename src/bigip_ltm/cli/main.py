"""
Typer application for running resource lifecycles by hand.

Declarations are YAML mappings of field name to value, the same shape the
engine hands to the adapters. Every command prints the resulting state as JSON
so it can be fed back through ``--state`` on a later ``read`` or ``update``.
"""

from __future__ import annotations

import json
from dataclasses import replace
from pathlib import Path
from typing import Any, Dict, List, Optional

import typer
import yaml

from ..adapters import AdapterError
from ..adapters.api.base import RemoteCallError
from ..config import load_settings
from ..core import ReplacementRequiredError, ResourceData, ResourceSchema, SchemaError, configure_logging, load_schema
from ..provider import ProviderContext, ProviderOptions
from ..resources import HTTP_PROFILE_RESOURCE, build_http_profile

app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help=(
        "Declarative BIG-IP LTM object management.\n\n"
        "Command groups:\n"
        "- http-profile: create, read, update, delete and import LTM HTTP profiles."
    ),
)
http_profile_app = typer.Typer(help="Manage LTM HTTP profiles (bigip_ltm_profile_http).")
app.add_typer(http_profile_app, name="http-profile")


def _json_default(value: Any) -> Any:
    if isinstance(value, (set, frozenset)):
        return sorted(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def _dump(payload: Any) -> str:
    return json.dumps(payload, ensure_ascii=False, indent=2, sort_keys=True, default=_json_default)


def _load_mapping(path: Path, *, what: str) -> Dict[str, Any]:
    if not path.is_file():
        raise typer.BadParameter(f"{what} file '{path}' does not exist.")
    try:
        with path.open("r", encoding="utf-8") as handle:
            payload = yaml.safe_load(handle)
    except yaml.YAMLError as exc:
        raise typer.BadParameter(f"Failed to parse {what} file '{path}': {exc}") from exc
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise typer.BadParameter(f"{what} file '{path}' must contain a mapping of field names to values.")
    return payload


def _load_declaration(schema: ResourceSchema, path: Path) -> Dict[str, Any]:
    config = schema.coerce(_load_mapping(path, what="Declaration"))
    schema.validate(config)
    return config


def _load_state(schema: ResourceSchema, path: Path) -> tuple[str, Dict[str, Any]]:
    # JSON is a subset of YAML, so saved command output loads the same way.
    payload = _load_mapping(path, what="State")
    identity = str(payload.pop("id", "") or "")
    return identity, schema.coerce(payload)


def _fail(message: str, code: int = 1) -> typer.Exit:
    typer.echo(message, err=True)
    return typer.Exit(code=code)


@app.callback(invoke_without_command=False)
def main(
    ctx: typer.Context,
    address: Optional[str] = typer.Option(None, "--address", help="BIG-IP management address (overrides BIGIP_HOST)."),
    username: Optional[str] = typer.Option(None, "--username", help="BIG-IP user (overrides BIGIP_USER)."),
    password: Optional[str] = typer.Option(None, "--password", help="BIG-IP password (overrides BIGIP_PASSWORD).", hide_input=True),
    port: Optional[int] = typer.Option(None, "--port", help="Management port (overrides BIGIP_PORT)."),
    no_telemetry: bool = typer.Option(False, "--no-telemetry", help="Do not send anonymous usage reports."),
    dry_run: bool = typer.Option(False, "--dry-run", help="Print request payloads without contacting the device."),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Logging level, e.g. DEBUG or WARNING."),
    tags: Optional[List[str]] = typer.Option(None, "--tag", help="Observability tag attached to adapter log records. Repeatable."),
) -> None:
    """
    Store global options.

    The provider context is built lazily by the first command that needs the
    device, so ``--dry-run`` and ``schema`` work without credentials.
    """

    configure_logging(log_level, force=log_level is not None)
    state = ctx.ensure_object(dict)
    state["options"] = ProviderOptions(dry_run=dry_run, observability_tags=tuple(tags or ()))
    state["overrides"] = {"address": address, "username": username, "password": password, "port": port}
    state["no_telemetry"] = no_telemetry


def _require_options(ctx: typer.Context) -> ProviderOptions:
    options = ctx.ensure_object(dict).get("options")
    if not isinstance(options, ProviderOptions):
        raise typer.Exit(code=2)
    return options


def _require_context(ctx: typer.Context) -> ProviderContext:
    state = ctx.ensure_object(dict)
    context = state.get("context")
    if isinstance(context, ProviderContext):
        return context

    settings = load_settings(strict=False)
    overrides = {key: value for key, value in state.get("overrides", {}).items() if value is not None}
    if overrides:
        settings.device = replace(settings.device, **overrides)
    if state.get("no_telemetry"):
        settings.telemetry.disabled = True
    try:
        context = ProviderContext.build_default(settings=settings, options=_require_options(ctx))
    except AdapterError as exc:
        raise _fail(str(exc)) from exc
    state["context"] = context
    return context


@http_profile_app.command("schema")
def http_profile_schema(
    output_json: bool = typer.Option(False, "--json", help="Emit the field schema as JSON."),
) -> None:
    """List the fields an HTTP profile declaration accepts."""

    schema = load_schema(HTTP_PROFILE_RESOURCE)
    if output_json:
        payload = [
            {
                "name": spec.name,
                "type": spec.type.value,
                "required": spec.required,
                "computed": spec.computed,
                "force_new": spec.force_new,
                "description": spec.description,
                "fields": sorted(spec.fields),
            }
            for spec in schema
        ]
        typer.echo(_dump(payload))
        return

    header = f"{'Field':<32} {'Type':<7} {'Flags':<22} Description"
    typer.echo(header)
    typer.echo("-" * len(header))
    for spec in schema:
        flags = ",".join(flag for flag, enabled in (("required", spec.required), ("computed", spec.computed), ("force-new", spec.force_new)) if enabled)
        typer.echo(f"{spec.name:<32} {spec.type.value:<7} {flags or '-':<22} {spec.description}")


@http_profile_app.command("create")
def http_profile_create(
    ctx: typer.Context,
    declaration: Path = typer.Argument(..., help="YAML declaration of the profile."),
) -> None:
    """Create a profile from a declaration and print the resulting state."""

    schema = load_schema(HTTP_PROFILE_RESOURCE)
    try:
        config = _load_declaration(schema, declaration)
    except SchemaError as exc:
        raise _fail(str(exc)) from exc

    if _require_options(ctx).dry_run:
        profile = build_http_profile(ResourceData(schema, config), name=config["name"])
        typer.echo(_dump({"method": "POST", "body": profile.to_payload()}))
        return

    resource = _require_context(ctx).http_profile()
    data = resource.new_data(config)
    try:
        resource.create(data)
    except RemoteCallError as exc:
        raise _fail(f"Create failed: {exc}") from exc
    typer.echo(_dump(data.snapshot()))


@http_profile_app.command("read")
def http_profile_read(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Full path of the profile, e.g. /Common/http-prof-1."),
    state_file: Optional[Path] = typer.Option(None, "--state", help="State printed by an earlier command; limits which fields are refreshed."),
) -> None:
    """Refresh a profile from the device."""

    resource = _require_context(ctx).http_profile()
    prior: Dict[str, Any] = {}
    if state_file:
        try:
            _, prior = _load_state(resource.schema, state_file)
        except SchemaError as exc:
            raise _fail(str(exc)) from exc
    data = resource.new_data(state=prior, resource_id=name)
    try:
        resource.read(data)
    except RemoteCallError as exc:
        raise _fail(f"Read failed: {exc}") from exc
    if not data.id:
        raise _fail(f"HTTP profile '{name}' does not exist.")
    typer.echo(_dump(data.snapshot()))


@http_profile_app.command("import")
def http_profile_import(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Full path of an existing profile."),
) -> None:
    """Adopt an existing profile and print its state."""

    resource = _require_context(ctx).http_profile()
    try:
        data = resource.import_state(name)
    except RemoteCallError as exc:
        raise _fail(f"Import failed: {exc}") from exc
    if not data.id:
        raise _fail(f"Cannot import non-existent HTTP profile '{name}'.")
    typer.echo(_dump(data.snapshot()))


@http_profile_app.command("update")
def http_profile_update(
    ctx: typer.Context,
    declaration: Path = typer.Argument(..., help="YAML declaration of the profile."),
    state_file: Optional[Path] = typer.Option(None, "--state", help="State printed by an earlier command. When omitted the profile is imported first."),
) -> None:
    """Push a changed declaration to an existing profile."""

    schema = load_schema(HTTP_PROFILE_RESOURCE)
    try:
        config = _load_declaration(schema, declaration)
    except SchemaError as exc:
        raise _fail(str(exc)) from exc

    if _require_options(ctx).dry_run:
        profile = build_http_profile(ResourceData(schema, config), name=None)
        typer.echo(_dump({"method": "PUT", "name": config["name"], "body": profile.to_payload(include_name=False)}))
        return

    resource = _require_context(ctx).http_profile()
    try:
        if state_file:
            identity, prior = _load_state(schema, state_file)
        else:
            imported = resource.import_state(config["name"])
            identity, prior = imported.id, imported.state
        if not identity:
            raise _fail(f"HTTP profile '{config['name']}' does not exist; create it first.")
        changed = schema.requires_replacement(prior, config)
        if changed:
            raise ReplacementRequiredError(changed)
        data = resource.new_data(config, state=prior, resource_id=identity)
        resource.update(data)
    except SchemaError as exc:
        raise _fail(str(exc)) from exc
    except RemoteCallError as exc:
        raise _fail(f"Update failed: {exc}") from exc
    typer.echo(_dump(data.snapshot()))


@http_profile_app.command("delete")
def http_profile_delete(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Full path of the profile."),
) -> None:
    """Delete a profile from the device."""

    if _require_options(ctx).dry_run:
        typer.echo(_dump({"method": "DELETE", "name": name}))
        return

    resource = _require_context(ctx).http_profile()
    data = resource.new_data(resource_id=name)
    try:
        resource.delete(data)
    except RemoteCallError as exc:
        raise _fail(f"Delete failed: {exc}") from exc
    typer.echo(f"Deleted HTTP profile '{name}'.")
