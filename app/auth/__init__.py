"""Bearer-token authentication against the hosted auth provider."""
