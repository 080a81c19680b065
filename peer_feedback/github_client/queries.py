"""GraphQL documents used against the GitHub v4 API.

Every document selects ``rateLimit`` so the executor can track the budget.
"""

# ruff: noqa: E501

SEARCH_CONTRIBUTIONS_QUERY = """
query($searchQuery: String!, $type: SearchType!, $first: Int!, $after: String) {
  search(query: $searchQuery, type: $type, first: $first, after: $after) {
    pageInfo {
      hasNextPage
      endCursor
    }
    nodes {
      __typename
      ... on Issue {
        title
        url
        number
        updatedAt
        repository { name owner { login } }
      }
      ... on PullRequest {
        title
        url
        number
        updatedAt
        repository { name owner { login } }
      }
      ... on Discussion {
        title
        url
        number
        updatedAt
        repository { name owner { login } }
      }
    }
  }
  rateLimit {
    remaining
    resetAt
  }
}
"""

ISSUE_DETAIL_QUERY = """
query($owner: String!, $repo: String!, $number: Int!) {
  repository(owner: $owner, name: $repo) {
    issue(number: $number) {
      title
      author { login }
      body
      url
      createdAt
      updatedAt
      state
      labels(first: 100) { nodes { name } }
      comments(first: 100) {
        nodes { body author { login } createdAt }
      }
    }
  }
  rateLimit {
    remaining
    resetAt
  }
}
"""

PULL_REQUEST_DETAIL_QUERY = """
query($owner: String!, $repo: String!, $number: Int!) {
  repository(owner: $owner, name: $repo) {
    pullRequest(number: $number) {
      title
      author { login }
      body
      url
      createdAt
      updatedAt
      state
      labels(first: 100) { nodes { name } }
      comments(first: 100) {
        nodes { body author { login } createdAt }
      }
      reviews(first: 100) {
        nodes {
          body
          author { login }
          state
          createdAt
          comments(first: 100) { nodes { body path line } }
        }
      }
    }
  }
  rateLimit {
    remaining
    resetAt
  }
}
"""

DISCUSSION_DETAIL_QUERY = """
query($owner: String!, $repo: String!, $number: Int!) {
  repository(owner: $owner, name: $repo) {
    discussion(number: $number) {
      title
      author { login }
      body
      url
      createdAt
      updatedAt
      closed
      category { name }
      isAnswered
      answer {
        body
        author { login }
        createdAt
        replies(first: 100) { nodes { body author { login } createdAt } }
      }
      labels(first: 100) { nodes { name } }
      comments(first: 100) {
        nodes { body author { login } createdAt }
      }
    }
  }
  rateLimit {
    remaining
    resetAt
  }
}
"""
