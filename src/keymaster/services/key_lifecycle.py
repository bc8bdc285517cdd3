# Drive a key request from parameters to persisted material plus registry entry.
from __future__ import annotations

from datetime import date, datetime
from pathlib import Path
from typing import Callable, List, Optional, Tuple

import structlog

from ..config import AppConfig, GenerationConfig
from ..crypto.backend import CryptoBackend, CryptographyBackend, SizeOrCurve
from ..models import (
    ECDSA_CURVE,
    Algorithm,
    BatchFailure,
    BatchPolicy,
    BatchReport,
    ConsistencyReport,
    GenerationResult,
    KeyMaterial,
    KeyRequest,
    RegistryEntry,
)
from ..storage.file_io import PRIVATE_MODE, atomic_write_bytes, read_optional_bytes, remove_file
from ..storage.paths import PathResolver
from ..storage.registry import Registry
from ..utils.errors import KeymasterError, RegistryCorruptError, StorageError, ValidationError
from ..utils.validation import ensure_alias, ensure_ca_path, ensure_choice, ensure_positive_days
from .expiry import capture_base, compute_expiry

CERT_MODE = 0o644

logger = structlog.get_logger(__name__)

RequestSource = Callable[[int], KeyRequest]


class KeyLifecycleManager:
    """Generate, replace and remove keys while keeping registry and disk in step.

    An alias has a registry line iff ``<alias>.pem`` exists. Generating an
    alias that is already registered replaces its material and its line;
    the old files are never left next to the new ones.
    """

    def __init__(
        self,
        paths: PathResolver,
        registry: Registry | None = None,
        backend: CryptoBackend | None = None,
        settings: GenerationConfig | None = None,
    ) -> None:
        self.paths = paths
        self.registry = registry or Registry(paths.registry)
        self.backend = backend or CryptographyBackend()
        self.settings = settings or GenerationConfig()

    @classmethod
    def from_config(cls, config: AppConfig, backend: CryptoBackend | None = None) -> "KeyLifecycleManager":
        paths = PathResolver(config.storage.store_dir, config.storage.registry_name)
        return cls(paths, backend=backend, settings=config.generation)

    # ----- Queries -----
    def exists(self, alias: str) -> bool:
        return self.registry.exists(alias)

    def list_entries(self) -> List[RegistryEntry]:
        return self.registry.entries()

    def check(self) -> ConsistencyReport:
        registered = set(self.registry.aliases())
        on_disk = set(self.paths.iter_material_aliases())
        return ConsistencyReport(
            missing_material=sorted(registered - on_disk),
            untracked_material=sorted(on_disk - registered),
        )

    # ----- Single key -----
    def validate(self, request: KeyRequest) -> KeyRequest:
        alias = ensure_alias(request.alias)
        ensure_positive_days(request.validity_days)
        if not isinstance(request.algorithm, Algorithm):
            raise ValidationError(f"Unknown algorithm: {request.algorithm!r}")
        ensure_choice(request.key_size, request.algorithm.key_sizes, f"{request.algorithm.value} key size")
        if request.signing.is_ca_signed:
            ensure_ca_path(request.signing.ca_cert_path, "CA certificate")
            ensure_ca_path(request.signing.ca_key_path, "CA key")
        if alias != request.alias:
            request = KeyRequest(
                alias=alias,
                algorithm=request.algorithm,
                key_size=request.key_size,
                signing=request.signing,
                validity_days=request.validity_days,
            )
        return request

    def generate(self, request: KeyRequest, *, base: Optional[datetime] = None) -> GenerationResult:
        log = logger.bind(alias=getattr(request, "alias", None))
        try:
            request = self.validate(request)
            base = base or capture_base()
            expiry = compute_expiry(base, request.validity_days)
            material = self._produce(request, base)
            path, size, replaced = self._commit(material, expiry)
        except KeymasterError as exc:
            log.warning("key.failed", error=str(exc), kind=type(exc).__name__)
            raise
        log.info(
            "key.generated",
            algorithm=request.algorithm.value,
            signing=request.signing.describe(),
            expiry=str(expiry),
            size=size,
            replaced=replaced,
            created=material.created_at.isoformat(),
        )
        return GenerationResult(
            alias=request.alias, expiry_date=expiry, size_bytes=size, path=path, replaced=replaced
        )

    def _key_param(self, request: KeyRequest) -> SizeOrCurve:
        # the ECDSA size selection is advisory; the curve is fixed
        if request.algorithm is Algorithm.ECDSA:
            return ECDSA_CURVE
        return request.key_size

    def _produce(self, request: KeyRequest, base: datetime) -> KeyMaterial:
        if not request.signing.is_ca_signed:
            content = self.backend.generate_raw_key(request.algorithm, self._key_param(request))
            return KeyMaterial(alias=request.alias, content=content, created_at=base)

        if self.settings.propagate_key_params:
            csr_pem, key_pem = self.backend.generate_signing_request(
                request.alias, request.algorithm, self._key_param(request)
            )
        else:
            csr_pem, key_pem = self.backend.generate_signing_request(request.alias)
        cert_pem = self.backend.sign_certificate(
            csr_pem,
            request.signing.ca_cert_path,
            request.signing.ca_key_path,
            validity_days=self.settings.certificate_days or request.validity_days,
            not_before=base,
        )
        return KeyMaterial(alias=request.alias, content=cert_pem, created_at=base, companion_key=key_pem)

    def _commit(self, material: KeyMaterial, expiry: date) -> Tuple[Path, int, bool]:
        alias = material.alias
        material_path = self.paths.material(alias)
        companion_path = self.paths.companion(alias)
        self.paths.ensure()

        replaced = self.registry.exists(alias)
        if replaced:
            logger.info("key.collision", alias=alias, path=str(material_path))
        previous = read_optional_bytes(material_path)
        previous_companion = read_optional_bytes(companion_path)
        material_mode = CERT_MODE if material.companion_key is not None else PRIVATE_MODE

        try:
            if material.companion_key is not None:
                atomic_write_bytes(companion_path, material.companion_key, PRIVATE_MODE)
                atomic_write_bytes(material_path, material.content, CERT_MODE)
            else:
                atomic_write_bytes(material_path, material.content, PRIVATE_MODE)
                remove_file(companion_path)
            # the file holds exactly the generated bytes
            self.registry.upsert(alias, expiry, material.size_bytes)
        except StorageError:
            self._restore(material_path, previous, material_mode)
            self._restore(companion_path, previous_companion, PRIVATE_MODE)
            raise
        return material_path, material.size_bytes, replaced

    def _restore(self, path: Path, content: Optional[bytes], mode: int) -> None:
        try:
            if content is None:
                remove_file(path)
            else:
                atomic_write_bytes(path, content, mode)
        except StorageError as exc:
            logger.error("key.rollback_failed", path=str(path), error=str(exc))

    # ----- Removal -----
    def remove(self, alias: str) -> bool:
        alias = ensure_alias(alias)
        # an unreadable registry must fail before any file is touched
        self.registry.exists(alias)
        removed = remove_file(self.paths.material(alias))
        remove_file(self.paths.companion(alias))
        removed = self.registry.remove(alias) or removed
        if removed:
            logger.info("key.removed", alias=alias)
        return removed

    # ----- Batch -----
    def generate_batch(
        self,
        count: int,
        request_for: RequestSource,
        *,
        policy: Optional[BatchPolicy] = None,
        base: Optional[datetime] = None,
        on_result: Optional[Callable[[int, GenerationResult], None]] = None,
        on_failure: Optional[Callable[[BatchFailure], None]] = None,
    ) -> BatchReport:
        """Run ``generate`` ``count`` times with one shared expiry base.

        ``request_for(index)`` is called with 1-based indices to obtain each
        request. Under ``BatchPolicy.CONTINUE`` a failing key is recorded
        and the batch moves on; ``BatchPolicy.STOP`` ends the batch at the
        first failure. An unreadable registry always ends the batch.
        """
        if isinstance(count, bool) or not isinstance(count, int) or count <= 0:
            raise ValidationError(f"Number of keys must be a positive integer, got {count!r}")
        policy = policy or self.settings.batch_policy
        base = base or capture_base()
        report = BatchReport()

        for index in range(1, count + 1):
            alias = None
            try:
                request = request_for(index)
                alias = request.alias
                result = self.generate(request, base=base)
            except KeymasterError as exc:
                failure = BatchFailure(index=index, alias=alias, error=exc)
                report.failures.append(failure)
                if on_failure is not None:
                    on_failure(failure)
                if isinstance(exc, RegistryCorruptError) or policy is BatchPolicy.STOP:
                    report.aborted = True
                    break
                continue
            report.results.append(result)
            if on_result is not None:
                on_result(index, result)

        logger.info(
            "batch.finished",
            requested=count,
            generated=len(report.results),
            failed=len(report.failures),
            aborted=report.aborted,
        )
        return report


__all__ = ["KeyLifecycleManager", "RequestSource"]
