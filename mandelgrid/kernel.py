"""Vectorized escape-time iteration on TensorFlow."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import numpy as np
import tensorflow as tf

from .point import IterationLimits

DEFAULT_DEVICE = "/CPU:0"

_VECTOR = tf.TensorSpec(shape=[None], dtype=tf.float64)


@dataclass(frozen=True)
class EscapeResult:
    """Final recurrence state for a batch of points."""

    z_real: np.ndarray
    z_imag: np.ndarray
    steps: np.ndarray
    in_set: np.ndarray


@tf.function
def _escape_step(
    zr: tf.Tensor,
    zi: tf.Tensor,
    cr: tf.Tensor,
    ci: tf.Tensor,
    ns: tf.Tensor,
    active: tf.Tensor,
    bailout: tf.Tensor,
) -> tuple[tf.Tensor, tf.Tensor, tf.Tensor, tf.Tensor]:
    """Perform a single step for points that have not escaped."""

    zr_new = zr * zr - zi * zi + cr
    zi_new = 2.0 * zr * zi + ci
    zr = tf.where(active, zr_new, zr)
    zi = tf.where(active, zi_new, zi)
    ns = ns + tf.cast(active, tf.int64)
    new_active = tf.logical_and(active, zr * zr + zi * zi < bailout)
    return zr, zi, ns, new_active


@tf.function(
    input_signature=[
        _VECTOR,
        _VECTOR,
        _VECTOR,
        _VECTOR,
        tf.TensorSpec(shape=[], dtype=tf.int64),
        tf.TensorSpec(shape=[], dtype=tf.float64),
    ]
)
def _escape_run(
    cr: tf.Tensor,
    ci: tf.Tensor,
    zr: tf.Tensor,
    zi: tf.Tensor,
    max_iterations: tf.Tensor,
    bailout: tf.Tensor,
) -> tuple[tf.Tensor, tf.Tensor, tf.Tensor, tf.Tensor]:
    """Iterate every point until it escapes or ``max_iterations`` steps have run."""

    i = tf.constant(0, dtype=tf.int64)
    ns = tf.zeros_like(cr, dtype=tf.int64)
    active = zr * zr + zi * zi < bailout

    def cond(i, zr, zi, ns, active):
        return tf.logical_and(tf.less(i, max_iterations), tf.reduce_any(active))

    def body(i, zr, zi, ns, active):
        zr, zi, ns, active = _escape_step(zr, zi, cr, ci, ns, active, bailout)
        return i + 1, zr, zi, ns, active

    _, zr, zi, ns, _ = tf.while_loop(cond, body, (i, zr, zi, ns, active))
    in_set = zr * zr + zi * zi < bailout
    return zr, zi, ns, in_set


def escape(
    c_real: np.ndarray,
    c_imag: np.ndarray,
    z_real: np.ndarray,
    z_imag: np.ndarray,
    limits: IterationLimits,
    *,
    device: Optional[str] = None,
) -> EscapeResult:
    """Run the recurrence for a batch of points starting from ``z``.

    ``steps`` counts the iterations performed by this call only.
    """

    with tf.device(device if device is not None else DEFAULT_DEVICE):
        zr, zi, ns, in_set = _escape_run(
            tf.convert_to_tensor(c_real, dtype=tf.float64),
            tf.convert_to_tensor(c_imag, dtype=tf.float64),
            tf.convert_to_tensor(z_real, dtype=tf.float64),
            tf.convert_to_tensor(z_imag, dtype=tf.float64),
            tf.constant(limits.max_iterations, dtype=tf.int64),
            tf.constant(limits.bailout_squared, dtype=tf.float64),
        )

    return EscapeResult(
        z_real=zr.numpy(),
        z_imag=zi.numpy(),
        steps=ns.numpy(),
        in_set=in_set.numpy(),
    )
