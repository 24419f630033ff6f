# lsm_options/simulation.py
"""
Path simulation helpers for feeding the LSM engines (tests, benchmarks, examples).
The engines themselves never simulate; they take these arrays as input.

Functions:
- simulate_gbm_paths(S0, mu, sigma, T, n_steps, n_paths, seed, antithetic)
"""

import numpy as np


def _sample_Z(rng, n_paths, antithetic):
    if antithetic:
        half = n_paths // 2
        Z_half = rng.standard_normal(half)
        Z = np.concatenate([Z_half, -Z_half])
        if n_paths % 2 == 1:
            Z = np.concatenate([Z, rng.standard_normal(1)])
        return Z
    return rng.standard_normal(n_paths)


def simulate_gbm_paths(S0, mu, sigma, T, n_steps, n_paths, seed=None, antithetic=False):
    """
    Simulate geometric Brownian motion paths.

    Returns array of shape (n_steps+1, n_paths) including t=0 (time x path).
    """
    rng = np.random.default_rng(seed)
    n_steps = int(n_steps)
    n_paths = int(n_paths)
    dt = float(T) / float(n_steps)
    paths = np.empty((n_steps + 1, n_paths), dtype=float)
    paths[0, :] = float(S0)
    drift = (float(mu) - 0.5 * float(sigma) ** 2) * dt
    vol = float(sigma) * np.sqrt(dt)
    for t in range(1, n_steps + 1):
        Z = _sample_Z(rng, n_paths, antithetic)
        paths[t, :] = paths[t - 1, :] * np.exp(drift + vol * Z)
    return paths
