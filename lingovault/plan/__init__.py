"""
Plan layer: path expressions, plan normalization and the plan request.

Import the submodules directly (``lingovault.plan.path``,
``lingovault.plan.normalizer``, ``lingovault.plan.requester``); this
package does not re-export them because ``lingovault.ir`` depends on
``lingovault.plan.path``.
"""
