"""Parameter estimation for multisigmoidal lognormal diffusion processes from sampled paths."""

__version__ = "0.1.0"