"""PDF page rasterization with a three-strategy fallback chain.

Pages are converted one at a time. The bundled GraphicsMagick build is
tried first, then the system ``gm`` binary, then pdf2image (poppler).
Child processes get an environment built from scratch because the host
OS may strip dynamic-linker variables from inherited environments.
"""

import os
import shutil
import subprocess
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path

import numpy as np
from pdf2image import convert_from_path
from pdf2image.exceptions import (
    PDFInfoNotInstalledError,
    PDFPageCountError,
    PDFPopplerTimeoutError,
    PDFSyntaxError,
)
from pdf2image.pdf2image import pdfinfo_from_path
from PIL import Image

from valuation_ocr.preprocessing.image_enhance import enhance_for_ocr
from valuation_ocr.utils.config import RasterizerConfig
from valuation_ocr.utils.logger import get_logger

logger = get_logger(__name__)


class RasterStrategy(StrEnum):
    """Page conversion strategies, in fallback order."""

    BUNDLED = "bundled-graphicsmagick"
    SYSTEM = "system-graphicsmagick"
    PDF2IMAGE = "pdf2image"


STRATEGY_ORDER: tuple[RasterStrategy, ...] = (
    RasterStrategy.BUNDLED,
    RasterStrategy.SYSTEM,
    RasterStrategy.PDF2IMAGE,
)

_INHERITED_VARIABLES = (
    "PATH",
    "HOME",
    "TMPDIR",
    "TEMP",
    "TMP",
    "LANG",
    "LC_ALL",
    "SYSTEMROOT",
)
_LIBRARY_VARIABLES = (
    "LD_LIBRARY_PATH",
    "DYLD_LIBRARY_PATH",
    "DYLD_FALLBACK_LIBRARY_PATH",
)
# Homebrew (Intel, Apple Silicon) and distribution package locations.
_SYSTEM_TOOL_DIRS = ("/usr/local/bin", "/opt/homebrew/bin", "/usr/bin")
_GS_PLACEHOLDER = "@GS_BIN_PATH@"


class RasterizationError(RuntimeError):
    """Raised when every conversion strategy failed for a page."""


class NoMorePagesError(Exception):
    """Raised when the requested page does not exist in the document."""

    def __init__(self, page_number: int) -> None:
        super().__init__(f"Page {page_number} is beyond the end of the document")
        self.page_number = page_number


class _StrategyError(RuntimeError):
    """A single strategy failed; the next one should be tried."""


@dataclass
class RawPage:
    """A rasterized page waiting for OCR."""

    page_number: int
    image_path: Path
    strategy: RasterStrategy
    fallback_reasons: list[str] = field(default_factory=list)

    @property
    def image_bytes(self) -> bytes:
        return self.image_path.read_bytes()

    def discard(self) -> None:
        """Delete the temporary raster file."""
        self.image_path.unlink(missing_ok=True)


@dataclass
class RasterContext:
    """Per-document rasterization state.

    Holds the sticky strategy (the one that last succeeded) and the
    lazily read page count. One context per document; never shared.

    Args:
        pdf_path: Path of the PDF written into the document's work dir.
        work_dir: Caller-owned temporary directory for raster files.
    """

    pdf_path: Path
    work_dir: Path
    strategy_index: int = 0
    page_count: int | None = None
    page_count_checked: bool = False

    @property
    def active_strategy(self) -> RasterStrategy:
        return STRATEGY_ORDER[self.strategy_index]


def build_environment(
    strategy: RasterStrategy,
    config: RasterizerConfig,
    base_env: Mapping[str, str] | None = None,
    configure_dir: Path | None = None,
) -> dict[str, str]:
    """Build the child-process environment for a GraphicsMagick strategy.

    Only a small whitelist of variables is copied from ``base_env``;
    library search paths are never inherited.

    Args:
        strategy: ``BUNDLED`` or ``SYSTEM``.
        config: Rasterizer configuration (bundle location).
        base_env: Source environment. Defaults to ``os.environ``.
        configure_dir: Directory holding a runtime ``delegates.mgk``.
            Defaults to the bundle's own ``config`` directory.

    Returns:
        Environment mapping for ``subprocess.run``.

    Raises:
        ValueError: For strategies that do not spawn GraphicsMagick, or
            ``BUNDLED`` without a configured bundle.
    """
    source = os.environ if base_env is None else base_env
    env = {name: source[name] for name in _INHERITED_VARIABLES if name in source}
    path_entries = [p for p in env.get("PATH", "").split(os.pathsep) if p]

    if strategy == RasterStrategy.BUNDLED:
        if not config.bundle_dir:
            raise ValueError("No GraphicsMagick bundle configured")
        bundle = Path(config.bundle_dir)
        env["PATH"] = os.pathsep.join([str(bundle / "bin"), *path_entries])
        for name in _LIBRARY_VARIABLES:
            env[name] = str(bundle / "lib")
        if configure_dir is None and (bundle / "config").is_dir():
            configure_dir = bundle / "config"
        if configure_dir is not None:
            env["MAGICK_CONFIGURE_PATH"] = str(configure_dir)
        return env

    if strategy == RasterStrategy.SYSTEM:
        path_entries += [d for d in _SYSTEM_TOOL_DIRS if d not in path_entries]
        env["PATH"] = os.pathsep.join(path_entries)
        return env

    raise ValueError(f"Strategy {strategy} does not spawn GraphicsMagick")


def build_convert_args(
    pdf_path: Path,
    page_number: int,
    output_path: Path,
    config: RasterizerConfig,
) -> list[str]:
    """Build the ``gm convert`` arguments for one page.

    Args:
        pdf_path: Source PDF.
        page_number: 1-based page number.
        output_path: Destination PNG path.
        config: Rasterizer configuration.

    Returns:
        Argument list, without the binary itself.
    """
    args = [
        "convert",
        "-density",
        str(config.dpi),
        "-units",
        "PixelsPerInch",
        "-define",
        "pdf:use-cropbox=true",
        "-background",
        "white",
        f"{pdf_path}[{page_number - 1}]",
        "-alpha",
        "remove",
        "-alpha",
        "off",
        "-flatten",
        "-strip",
    ]
    if config.width and config.height:
        args += ["-filter", "Lanczos", "-resize", f"{config.width}x{config.height}>"]
    if config.apply_enhancements:
        args += [
            "-colorspace",
            "Gray",
            "-type",
            "Grayscale",
            "-contrast-stretch",
            config.contrast_stretch,
            "-sharpen",
            config.sharpen,
            "-enhance",
            "-normalize",
        ]
    args += ["-depth", "8", "-quality", "100", "-compress", "Zip", str(output_path)]
    return args


class Rasterizer:
    """Converts PDF pages to PNG files for OCR.

    Args:
        config: Rasterizer configuration.
    """

    def __init__(self, config: RasterizerConfig | None = None) -> None:
        self.config = config or RasterizerConfig()
        self._force_system = False

    def enable_system_fallback(self) -> None:
        """Skip the bundled build and start every page at the system binary."""
        logger.info("System GraphicsMagick fallback forced on")
        self._force_system = True

    def disable_system_fallback(self) -> None:
        logger.info("System GraphicsMagick fallback forced off")
        self._force_system = False

    def is_using_system_fallback(self) -> bool:
        return self._force_system

    def rasterize(self, context: RasterContext, page_number: int) -> RawPage:
        """Rasterize one page, walking the fallback chain as needed.

        Args:
            context: Per-document state; updated when a fallback succeeds.
            page_number: 1-based page number.

        Returns:
            The rasterized page.

        Raises:
            NoMorePagesError: If the page does not exist.
            RasterizationError: If every strategy failed.
        """
        self._check_page_exists(context, page_number)
        output_path = context.work_dir / f"page-{page_number}.png"

        start = context.strategy_index
        if self._force_system:
            start = max(start, STRATEGY_ORDER.index(RasterStrategy.SYSTEM))

        failures: list[str] = []
        for index in range(start, len(STRATEGY_ORDER)):
            strategy = STRATEGY_ORDER[index]
            try:
                self._convert(strategy, context, page_number, output_path)
            except _StrategyError as exc:
                logger.warning(
                    "Strategy %s failed for page %d: %s", strategy, page_number, exc
                )
                failures.append(f"{strategy}: {exc}")
                continue

            if index != context.strategy_index:
                logger.info(
                    "Page %d converted with %s; using it for remaining pages",
                    page_number,
                    strategy,
                )
                context.strategy_index = index
            return RawPage(page_number, output_path, strategy, failures)

        if page_number > 1 and context.page_count is None:
            logger.info("Page %d could not be converted, assuming end of document", page_number)
            raise NoMorePagesError(page_number)

        raise RasterizationError(
            f"All rasterization strategies failed for page {page_number}:\n"
            + "\n".join(failures)
        )

    def _check_page_exists(self, context: RasterContext, page_number: int) -> None:
        if not context.page_count_checked:
            context.page_count_checked = True
            try:
                info = pdfinfo_from_path(
                    str(context.pdf_path), timeout=int(self.config.timeout_seconds)
                )
                context.page_count = int(info["Pages"])
                logger.debug("PDF has %d pages", context.page_count)
            except (
                PDFInfoNotInstalledError,
                PDFPageCountError,
                PDFPopplerTimeoutError,
                PDFSyntaxError,
                KeyError,
                ValueError,
            ) as exc:
                logger.debug("Page count unavailable: %s", exc)

        if context.page_count is not None and page_number > context.page_count:
            raise NoMorePagesError(page_number)

    def _convert(
        self,
        strategy: RasterStrategy,
        context: RasterContext,
        page_number: int,
        output_path: Path,
    ) -> None:
        if strategy == RasterStrategy.PDF2IMAGE:
            self._convert_with_pdf2image(context, page_number, output_path)
        else:
            self._convert_with_graphicsmagick(strategy, context, page_number, output_path)

    def _convert_with_graphicsmagick(
        self,
        strategy: RasterStrategy,
        context: RasterContext,
        page_number: int,
        output_path: Path,
    ) -> None:
        if strategy == RasterStrategy.BUNDLED:
            if not self.config.bundle_dir:
                raise _StrategyError("no GraphicsMagick bundle configured")
            binary = str(Path(self.config.bundle_dir) / "bin" / "gm")
            if not Path(binary).exists():
                raise _StrategyError(f"bundled binary missing: {binary}")
            env = build_environment(
                strategy, self.config, configure_dir=self._runtime_delegates(context)
            )
        else:
            env = build_environment(strategy, self.config)
            found = shutil.which(self.config.system_binary, path=env["PATH"])
            if found is None:
                raise _StrategyError(f"{self.config.system_binary} not found on PATH")
            binary = found

        args = [binary, *build_convert_args(context.pdf_path, page_number, output_path, self.config)]
        logger.debug("Running %s", " ".join(args))
        try:
            result = subprocess.run(
                args,
                env=env,
                capture_output=True,
                text=True,
                timeout=self.config.timeout_seconds,
                check=False,
            )
        except subprocess.TimeoutExpired as exc:
            raise _StrategyError(
                f"timed out after {self.config.timeout_seconds:g}s"
            ) from exc
        except OSError as exc:
            raise _StrategyError(f"failed to start {binary}: {exc}") from exc

        if result.returncode != 0:
            raise _StrategyError(
                f"exit code {result.returncode}: {result.stderr.strip()}"
            )
        if not output_path.exists():
            raise _StrategyError(f"no output file produced at {output_path}")

    def _runtime_delegates(self, context: RasterContext) -> Path | None:
        """Write a delegates.mgk pointing at the bundled Ghostscript.

        The bundle ships a template with a placeholder for the Ghostscript
        path, which is only known at runtime.
        """
        bundle = Path(self.config.bundle_dir or "")
        template = bundle / "config" / "delegates.mgk"
        if not template.exists():
            return None

        runtime_dir = context.work_dir / "gm-config"
        runtime_file = runtime_dir / "delegates.mgk"
        if not runtime_file.exists():
            runtime_dir.mkdir(parents=True, exist_ok=True)
            content = template.read_text()
            runtime_file.write_text(
                content.replace(_GS_PLACEHOLDER, str(bundle / "bin" / "gs"))
            )
            logger.debug("Wrote runtime delegates to %s", runtime_file)
        return runtime_dir

    def _convert_with_pdf2image(
        self, context: RasterContext, page_number: int, output_path: Path
    ) -> None:
        try:
            images = convert_from_path(
                str(context.pdf_path),
                dpi=self.config.dpi,
                first_page=page_number,
                last_page=page_number,
                timeout=int(self.config.timeout_seconds),
            )
        except (
            PDFInfoNotInstalledError,
            PDFPageCountError,
            PDFPopplerTimeoutError,
            PDFSyntaxError,
            OSError,
        ) as exc:
            raise _StrategyError(f"pdf2image conversion failed: {exc}") from exc

        if not images:
            raise NoMorePagesError(page_number)

        page = images[0]
        page.thumbnail((self.config.width, self.config.height))
        array = np.array(page.convert("RGB"))
        if self.config.apply_enhancements:
            array = enhance_for_ocr(
                array, self.config.contrast_stretch, self.config.sharpen
            )
        Image.fromarray(array).save(output_path, format="PNG")
