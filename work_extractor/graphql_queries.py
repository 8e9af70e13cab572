"""
GraphQL Query Definitions — The fixed queries used for work-item extraction.

LINEAR_COMPLETED_ISSUES_QUERY
    Walks viewer.assignedIssues for the authenticated Linear user, filtered
    server-side on completedAt within [$startDate, $endDate]. Archived issues
    are included, since finished work is often archived. The server filter
    only looks at the completion timestamp, so an issue that was completed
    and later reopened can still match; the client re-checks state.type.

GITHUB_MERGED_PRS_QUERY
    Uses the search connection (type: ISSUE) with a search string such as
    "is:pr author:@me is:merged merged:2025-01-01..2026-02-28". Each edge
    node is narrowed to PullRequest with an inline fragment.

Both queries take $first (page size) and $after (cursor) and return a
pageInfo { hasNextPage endCursor } block for the Pagination Driver.
"""

LINEAR_COMPLETED_ISSUES_QUERY = """
query GetCompletedIssues($first: Int!, $after: String, $startDate: DateTimeOrDuration!, $endDate: DateTimeOrDuration!) {
  viewer {
    id
    name
    email
    assignedIssues(
      first: $first
      after: $after
      includeArchived: true
      filter: {
        completedAt: { gte: $startDate, lte: $endDate }
      }
    ) {
      nodes {
        id
        identifier
        title
        description
        url
        priority
        estimate
        createdAt
        updatedAt
        completedAt
        state {
          id
          name
          type
        }
        team {
          id
          name
          key
        }
        project {
          id
          name
        }
        cycle {
          number
          name
        }
        labels {
          nodes {
            name
          }
        }
        assignee {
          id
          name
          email
        }
      }
      pageInfo {
        hasNextPage
        endCursor
      }
    }
  }
}
"""

GITHUB_MERGED_PRS_QUERY = """
query GetMergedPRs($queryString: String!, $first: Int!, $after: String) {
  search(query: $queryString, type: ISSUE, first: $first, after: $after) {
    issueCount
    edges {
      node {
        ... on PullRequest {
          number
          title
          url
          body
          state
          mergedAt
          createdAt
          updatedAt
          additions
          deletions
          changedFiles
          headRefName
          repository {
            name
            owner {
              login
            }
          }
          reviews {
            totalCount
          }
          comments {
            totalCount
          }
          labels(first: 20) {
            nodes {
              name
            }
          }
        }
      }
      cursor
    }
    pageInfo {
      hasNextPage
      endCursor
    }
  }
}
"""
