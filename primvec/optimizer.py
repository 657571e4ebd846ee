"""Optimizer: sample random shapes, hill-climb the best one, keep it if it helps."""
import dataclasses
import logging
import time
from concurrent.futures import Executor, ThreadPoolExecutor, wait
from typing import Callable, List, Optional

import numpy as np

from primvec.raster import Raster, parse_color
from primvec.shapes import Shape
from primvec.state import State
from primvec.step import Step
from primvec.types import ConfigurationError, OptimizerPhase

logger = logging.getLogger(__name__)


class Optimizer:
    """
    Incrementally approximate a target raster with primitive shapes.

    Each outer iteration samples `config.shapes` random candidates in
    parallel, refines the best of them by mutation until
    `config.mutations` consecutive attempts fail to improve it, and
    commits it when it beats the current state. `on_step` is called once
    per iteration with the accepted step, or None when it was rejected.
    """

    def __init__(self, target: Raster, config, document):
        if document is None:
            raise ConfigurationError("Document required")

        if config.width is None or config.height is None:
            config = dataclasses.replace(
                config,
                width=config.width or target.width,
                height=config.height or target.height,
            )

        self.target = target
        self.config = config
        self.document = document
        self.rng = np.random.default_rng(config.seed)

        fill = target.mean_color() if config.fill == "auto" else config.fill
        self.fill = parse_color(fill)

        canvas = Raster.empty(target.width, target.height, self.fill)
        self.state = State(target, canvas)

        self.phase = OptimizerPhase.IDLE
        self.on_step: Callable[[Optional[Step]], object] = lambda step: None
        self.history: List[float] = []
        self.elapsed: Optional[float] = None
        self._steps = 0

        logger.info(f"Initial distance {self.state.distance:.6f}")

    @property
    def iterations(self) -> int:
        return self._steps

    def start(self) -> State:
        """
        Run the optimization to the configured iteration budget.

        Returns:
            Final state

        Raises:
            Any exception from candidate evaluation, unhandled
        """
        logger.info("Optimizer starting")
        started = time.time()

        workers = None if self.config.workers == -1 else self.config.workers
        with ThreadPoolExecutor(max_workers=workers) as executor:
            while self._steps < self.config.steps:
                self._add_shape(executor)
                if self._steps < self.config.steps:
                    # Yield point between iterations
                    time.sleep(self.config.pause)

        self.phase = OptimizerPhase.CONVERGED
        self.elapsed = time.time() - started

        logger.info(f"Target distance {self.state.distance:.6f}")
        logger.info(
            f"Real target distance {self.state.target.distance(self.state.canvas):.6f}"
        )
        logger.info(f"Finished in {self.elapsed:.2f}s")
        return self.state

    def _add_shape(self, executor: Executor) -> None:
        self.phase = OptimizerPhase.SAMPLING
        step = self._find_best_step(executor)

        self.phase = OptimizerPhase.REFINING
        step = self._optimize_step(step)

        self._steps += 1
        if step.distance < self.state.distance:
            self.state = step.apply(self.state)
            self.history.append(self.state.distance)
            logger.info(
                f"Switched to new state ({self._steps}) "
                f"with distance: {self.state.distance:.6f}"
            )
            self.on_step(step)
        else:
            self.on_step(None)

    def _create_step(self) -> Step:
        shape = Shape.create(self.config, self.document, self.rng)
        return Step(shape, self.config)

    def _find_best_step(self, executor: Executor) -> Step:
        """Evaluate fresh random candidates concurrently and keep the best."""
        state = self.state
        candidates = [self._create_step() for _ in range(self.config.shapes)]
        futures = [executor.submit(step.evaluate, state) for step in candidates]
        wait(futures)

        best_step = None
        for future in futures:
            step = future.result()
            if best_step is None or step.distance < best_step.distance:
                best_step = step
        return best_step

    def _optimize_step(self, step: Step) -> Step:
        """Hill-climb a step until `mutations` attempts in a row fail."""
        limit = self.config.mutations

        total_attempts = 0
        success_attempts = 0
        failed_attempts = 0
        best_step = step

        while failed_attempts < limit:
            total_attempts += 1
            mutated = best_step.mutate(self.rng).evaluate(self.state)
            if mutated.distance < best_step.distance:
                success_attempts += 1
                failed_attempts = 0
                best_step = mutated
            else:
                failed_attempts += 1

        logger.debug(
            f"Mutation optimized distance from {step.distance:.6f} to "
            f"{best_step.distance:.6f} in ({success_attempts} good, "
            f"{total_attempts} total) attempts"
        )
        return best_step
