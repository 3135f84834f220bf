"""authprofile command line interface."""
