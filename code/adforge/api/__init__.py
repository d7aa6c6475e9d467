"""Resource groups of the AdForge REST API, one module per backend area."""
