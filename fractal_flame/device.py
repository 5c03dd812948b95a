"""TensorFlow device placement for the tone-mapping stage."""

from __future__ import annotations

import logging

import tensorflow as tf

logger = logging.getLogger(__name__)


def select_device() -> str:
    """Return ``/GPU:0`` when TensorFlow can use a GPU, otherwise ``/CPU:0``."""

    gpus = tf.config.list_physical_devices('GPU')
    if not gpus:
        logger.debug("No GPU found, using CPU")
        return '/CPU:0'
    try:
        for gpu in gpus:
            tf.config.experimental.set_memory_growth(gpu, True)
    except RuntimeError as exc:
        # Memory growth must be set before the GPU is initialized.
        logger.debug("Could not configure GPU (%s), using CPU", exc)
        return '/CPU:0'
    logger.debug("GPU found, using %s", gpus[0].name)
    return '/GPU:0'
