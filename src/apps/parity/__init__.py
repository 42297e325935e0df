"""Command line application comparing Bicep and Terraform dry runs."""
