"""
Label and annotation names placed on pods created for ProwJobs.

These are exported for the process that creates pods; nothing in this
package attaches them or reads them back.
"""

# Added on pods created by prow. Owner references are not used because pods
# may live in a different namespace from their parent prowjob, and the
# garbage collector would treat them as orphans.
CREATED_BY_PROW = "created-by-prow"

# Carries the job type (presubmit, postsubmit, periodic, batch) that the pod
# is running.
PROW_JOB_TYPE_LABEL = "prow.k8s.io/type"

# Carries the name of the job that the pod is running. Job names can be
# arbitrarily long, so this is an annotation rather than a label.
PROW_JOB_ANNOTATION = "prow.k8s.io/job"
