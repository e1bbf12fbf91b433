# SPDX-FileCopyrightText: 2025-2026 Jiri Vyskocil <jiri@vyskocil.com>
#
# SPDX-License-Identifier: Apache-2.0

"""Storage service client boundary.

Activation checks that a service endpoint is configured and starts the
:class:`ErrorStream`, the one background worker of the process.  The
:class:`StorageClient` then talks JSON over HTTP (TCP or a unix socket) to
the storage service.  In async mode mutating requests are handed to the
error stream instead of being performed inline; their failures surface when
the stream is drained at exit.
"""

from __future__ import annotations

import queue
import threading
from collections.abc import Callable
from typing import Any
from urllib.parse import urlparse

import httpx

from .context import Context
from .core import config as cfg
from .core.config_store import ConfigStore
from .errors import ClientActivationError, ConfigValueError, StorageRequestError

_STOP = object()


class ErrorStream:
    """Background worker that runs deferred calls and collects their failures.

    The stream must be closed and waited on before the process exits;
    :meth:`wait` does both.
    """

    def __init__(self, name: str = "storctl-async") -> None:
        self._jobs: queue.Queue = queue.Queue()
        self._errors: list[Exception] = []
        self._closed = False
        self._thread = threading.Thread(target=self._run, name=name, daemon=True)
        self._thread.start()

    def _run(self) -> None:
        while True:
            job = self._jobs.get()
            if job is _STOP:
                return
            fn, args, kwargs = job
            try:
                fn(*args, **kwargs)
            except Exception as exc:  # reported through wait()
                self._errors.append(exc)

    def submit(self, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> None:
        """Queue ``fn(*args, **kwargs)`` on the worker thread."""
        if self._closed:
            raise RuntimeError("error stream is closed")
        self._jobs.put((fn, args, kwargs))

    def close(self) -> None:
        """Stop accepting work; queued jobs still run."""
        if not self._closed:
            self._closed = True
            self._jobs.put(_STOP)

    def wait(self, timeout: float | None = None) -> list[Exception]:
        """Close the stream, join the worker and return the collected errors."""
        self.close()
        self._thread.join(timeout)
        return list(self._errors)

    @property
    def running(self) -> bool:
        return self._thread.is_alive()


def activate(ctx: Context, config: ConfigStore) -> tuple[Context, ConfigStore, ErrorStream]:
    """Prepare the storage client environment.

    Returns the refreshed context and config together with the started
    error stream.

    Raises:
        ClientActivationError: when no storage service endpoint is configured.
    """
    host = config.get_string(cfg.LIBSTORAGE_HOST)
    if not host:
        raise ClientActivationError(
            "no storage service host configured",
            hint=f"Pass --host or set {cfg.LIBSTORAGE_HOST} in the config file.",
        )
    ctx = ctx.with_value("host", host)
    service = config.get_string(cfg.LIBSTORAGE_SERVICE)
    if service:
        ctx = ctx.with_value("service", service)
    return ctx, config, ErrorStream()


def endpoint(host: str) -> tuple[str, str | None]:
    """Split a configured *host* into an HTTP base URL and optional socket path.

    ``tcp://h:p`` becomes ``http://h:p``; ``unix:///run/s.sock`` is served over
    the socket with a placeholder base URL.

    Raises:
        ClientActivationError: when *host* is malformed or uses an unknown scheme.
    """
    try:
        parsed = urlparse(host if "://" in host else f"tcp://{host}")
    except ValueError as exc:
        raise ClientActivationError(
            f"invalid storage host {host!r}: {exc}",
            hint="Use tcp://host:port, unix:///path/to.sock or an http(s) URL.",
        ) from exc
    if parsed.scheme == "unix":
        return "http://storctl", parsed.path
    if parsed.scheme in ("tcp", ""):
        return f"http://{parsed.netloc}", None
    if parsed.scheme in ("http", "https"):
        return host.rstrip("/"), None
    raise ClientActivationError(f"unsupported storage host scheme: {parsed.scheme}")


class StorageClient:
    """JSON client for the storage service.

    Construction probes ``GET /services``; a service that cannot be reached
    fails activation.
    """

    def __init__(
        self,
        ctx: Context,
        config: ConfigStore,
        errors: ErrorStream | None = None,
        *,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.ctx = ctx
        self._errors = errors
        base_url, uds = endpoint(config.get_string(cfg.LIBSTORAGE_HOST))
        try:
            timeout = config.get_duration(cfg.CLIENT_TIMEOUT).total_seconds()
        except ConfigValueError as exc:
            raise ClientActivationError(str(exc), hint=exc.hint) from exc
        if transport is None and uds is not None:
            transport = httpx.HTTPTransport(uds=uds)
        try:
            self._http = httpx.Client(base_url=base_url, timeout=timeout, transport=transport)
        except httpx.InvalidURL as exc:
            raise ClientActivationError(f"invalid storage service URL {base_url!r}: {exc}") from exc
        services = self.services()
        self.service = config.get_string(cfg.LIBSTORAGE_SERVICE) or next(iter(services), "")

    def close(self) -> None:
        self._http.close()

    # -- plumbing -------------------------------------------------------------

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        try:
            resp = self._http.request(method, path, **kwargs)
            resp.raise_for_status()
        except httpx.HTTPStatusError as exc:
            body = exc.response.text.strip()[:500]
            detail = f": {body}" if body else ""
            raise StorageRequestError(
                f"{method} {path} failed with status {exc.response.status_code}{detail}",
                status_code=exc.response.status_code,
            ) from exc
        except httpx.HTTPError as exc:
            raise StorageRequestError(f"{method} {path} failed: {exc}") from exc
        if not resp.content:
            return None
        return resp.json()

    def _mutate(self, method: str, path: str, **kwargs: Any) -> Any:
        """Perform a mutating request, deferring it to the error stream in async mode."""
        if self.ctx.value("async") and self._errors is not None:
            self._errors.submit(self._request, method, path, **kwargs)
            return None
        return self._request(method, path, **kwargs)

    @staticmethod
    def _by_service(data: Any) -> list[dict]:
        """Flatten ``{service: {id: obj}}`` responses into a list of records."""
        records: list[dict] = []
        for service, items in (data or {}).items():
            values = items.values() if isinstance(items, dict) else items
            for item in values:
                record = dict(item)
                record.setdefault("service", service)
                records.append(record)
        return records

    # -- services / executors ---------------------------------------------------

    def services(self) -> dict[str, Any]:
        return self._request("GET", "/services") or {}

    def executors(self) -> list[dict]:
        data = self._request("GET", "/executors") or {}
        return [{"name": name, **(info or {})} for name, info in data.items()]

    # -- volumes ----------------------------------------------------------------

    def volumes(self, *, attached: bool = False, available: bool = False) -> list[dict]:
        params: dict[str, str] = {}
        if attached:
            params["attachments"] = "true"
        if available:
            params["available"] = "true"
        return self._by_service(self._request("GET", "/volumes", params=params))

    def volume_create(self, name: str, **opts: Any) -> Any:
        body = {"name": name, **{k: v for k, v in opts.items() if v not in (None, "")}}
        return self._mutate("POST", f"/volumes/{self.service}", json=body)

    def volume_remove(self, volume_id: str, *, force: bool = False) -> Any:
        params = {"force": "true"} if force else None
        return self._mutate("DELETE", f"/volumes/{self.service}/{volume_id}", params=params)

    def volume_action(self, volume_id: str, action: str, **opts: Any) -> Any:
        """POST ``/volumes/{service}/{id}?{action}`` (attach, detach, mount, ...)."""
        body = {k: v for k, v in opts.items() if v not in (None, "")}
        return self._mutate(
            "POST", f"/volumes/{self.service}/{volume_id}", params={action: ""}, json=body
        )

    # -- snapshots --------------------------------------------------------------

    def snapshots(self) -> list[dict]:
        return self._by_service(self._request("GET", "/snapshots"))

    def snapshot_create(self, volume_id: str, name: str = "", description: str = "") -> Any:
        return self.volume_action(volume_id, "snapshot", snapshotName=name, description=description)

    def snapshot_remove(self, snapshot_id: str) -> Any:
        return self._mutate("DELETE", f"/snapshots/{self.service}/{snapshot_id}")

    def snapshot_copy(self, snapshot_id: str, name: str = "", region: str = "") -> Any:
        body = {k: v for k, v in {"snapshotName": name, "destinationRegion": region}.items() if v}
        return self._mutate(
            "POST", f"/snapshots/{self.service}/{snapshot_id}", params={"copy": ""}, json=body
        )

    # -- devices ----------------------------------------------------------------

    def devices(self) -> list[dict]:
        data = self._request("GET", "/devices") or {}
        return [{"device": dev, "mountPoint": mnt} for dev, mnt in data.items()]

    def device_op(self, op: str, **opts: Any) -> Any:
        body = {k: v for k, v in opts.items() if v not in (None, "")}
        return self._mutate("POST", "/devices", params={op: ""}, json=body)

    # -- modules ----------------------------------------------------------------

    def modules(self) -> list[dict]:
        return self._request("GET", "/modules/types") or []

    def module_instances(self) -> list[dict]:
        return self._request("GET", "/modules/instances") or []

    def module_create(self, type_name: str, name: str, address: str, **opts: Any) -> Any:
        body = {"typeName": type_name, "name": name, "address": address, **opts}
        return self._mutate("POST", "/modules/instances", json=body)

    def module_start(self, name: str) -> Any:
        return self._mutate("POST", f"/modules/instances/{name}", params={"start": ""})
