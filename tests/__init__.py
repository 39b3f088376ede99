"""
Gompertz Tails — Test Suite
===========================

Test modules:
- test_abundance_data.py: CSV loading and log transform
- test_model.py: model payload, PyMC model structure, sampler wrapper
- test_summary.py: tail probabilities and comparison table
- test_plotting.py: figure generation
- test_workflow.py: end-to-end prior comparison with a fake sampler
"""
