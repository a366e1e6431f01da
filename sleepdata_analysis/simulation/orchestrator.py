"""
End-to-end driver for one chain of the sleep data analysis.

Pipeline:
1) Validate iterations, burn-in and requested variables.
2) Fix the canonical variable order.
3) Load signal data, summary statistics and total variance.
4) Build hyperprior means from the summary statistics.
5) Draw the run seed and build TPM + emission starting values.
6) Project the signal data to id + canonical variables (labels dropped).
7) Run the external sampler once.
8) Persist the full run result under a fresh unique id.

Nothing is written unless every step succeeds.
"""

from __future__ import annotations

import json
import logging
import time
import uuid
from pathlib import Path
from typing import Callable, Optional, Sequence

import numpy as np

from ..config.run_config import validate_run_config
from ..config.settings import Settings, configure_logging
from ..config.variables import canonicalize_variables
from ..data.resources import RunResources, load_resources, project_signal_data
from ..invariant_runtime import InvariantContext, reset_invariant_context, set_invariant_context
from ..mcmc.initial_state import draw_run_seed, generate_initial_state
from ..mcmc.sampler import MHMMSampler, resolve_sampler, run_sampler
from ..priors.hyperprior_means import build_hyperprior_means
from ..results.run_result import RunResult, save_run_result, summarize_run_result


class RunOrchestrator:
    def __init__(
        self,
        settings: Settings,
        sampler: Optional[MHMMSampler] = None,
        seed_rng: Optional[np.random.Generator] = None,
        resource_loader: Callable[..., RunResources] = load_resources,
        logger: Optional[logging.Logger] = None,
    ):
        self.settings = settings
        self.log = logger or configure_logging(settings.log_level)
        self._sampler = sampler
        self.seed_rng = seed_rng
        self.resource_loader = resource_loader
        self.last_result: Optional[RunResult] = None
        self.last_context: Optional[InvariantContext] = None

    @property
    def sampler(self) -> MHMMSampler:
        if self._sampler is None:
            self._sampler = resolve_sampler(self.settings.sampler_target)
        return self._sampler

    def run(self, iterations: int, burn_in: int, variables: Sequence[str]) -> Path:
        run_start = time.time()
        cfg = validate_run_config(iterations, burn_in, variables)
        canonical = canonicalize_variables(cfg.requested_variables, logger=self.log)
        shape = self.settings.shape
        sampler = self.sampler
        self.log.info(
            "Run start (iterations=%d, burn_in=%d, variables=%s)",
            cfg.iterations,
            cfg.burn_in,
            list(canonical),
        )

        resources = self.resource_loader(self.settings, self.log)
        priors = build_hyperprior_means(canonical, resources.summary_statistics, shape.m, logger=self.log)

        unique_id = str(uuid.uuid4())
        seed = draw_run_seed(self.seed_rng, seed_max=self.settings.seed_max)
        ctx = InvariantContext(
            unique_id=unique_id,
            run_seed=seed,
            variables=tuple(canonical),
            model_shape=shape.as_dict(),
        )
        self.last_context = ctx
        token = set_invariant_context(ctx)
        try:
            initial = generate_initial_state(
                seed,
                shape,
                canonical,
                resources.summary_statistics,
                resources.total_variance,
                diag_low=self.settings.diag_low,
                diag_high=self.settings.diag_high,
                jitter=self.settings.jitter,
                logger=self.log,
            )
        finally:
            reset_invariant_context(token)

        data_matrix = project_signal_data(resources.signal_data, canonical, logger=self.log)
        fitted = run_sampler(
            sampler,
            data_matrix,
            np.array(initial.transition_matrix),
            initial.emission_params.as_list(),
            shape.as_dict(),
            priors.as_list(),
            seed,
            iterations=cfg.iterations,
            burn_in=cfg.burn_in,
            logger=self.log,
        )

        result = RunResult(
            unique_id=unique_id,
            seed=seed,
            initial_values=initial,
            priors=priors,
            variables=tuple(canonical),
            iterations=cfg.iterations,
            burn_in=cfg.burn_in,
            fitted_model=fitted,
        )
        path = save_run_result(result, self.settings.output_dir, logger=self.log)
        self.last_result = result
        if self.log.isEnabledFor(logging.DEBUG):
            self.log.debug("Run summary: %s", json.dumps(summarize_run_result(result)))
        self.log.info("Run end (unique_id=%s, elapsed=%.2fs)", unique_id, time.time() - run_start)
        return path
