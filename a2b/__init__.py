"""Shared code for the A2B brand bridge Lambdas.

Packaged into a Lambda layer by the BridgeStack so every handler under
stacks/lambda_functions/ can import it.
"""
