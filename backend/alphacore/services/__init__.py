"""Services - IO-bound orchestration on top of the pure core modules."""
