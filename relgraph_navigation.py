# relgraph_navigation.py
# Part of the RelGraph Project
# Drill-down history: overview -> group -> contact, and back again one step at a time.

import logging

from relgraph_projection import Level, NavigationState

logger = logging.getLogger(__name__)


class NavigationStack:
    """Current navigation state plus the states that led to it.

    Forward moves push the state being left; back pops it. back() returns False
    when there is nothing left to pop so the caller can hand off to its own exit.
    """

    def __init__(self):
        self.current = NavigationState.overview()
        self.history = []

    def _push(self, new_state):
        logger.debug("Navigate %s -> %s", self.current, new_state)
        self.history.append(self.current)
        self.current = new_state

    def select_group(self, group_key):
        if self.current.level is not Level.OVERVIEW:
            logger.debug("Ignoring group selection '%s' outside the overview", group_key)
            return False
        self._push(NavigationState.group(group_key))
        return True

    def select_contact(self, node_id):
        if self.current == NavigationState.contact(node_id):
            return False
        self._push(NavigationState.contact(node_id))
        return True

    def navigate_to(self, state):
        """Jump straight to state (e.g. a breadcrumb), skipping the forward rules."""
        self._push(state)

    def back(self):
        if not self.history:
            return False
        previous = self.history.pop()
        logger.debug("Back %s -> %s", self.current, previous)
        self.current = previous
        return True

    def reset(self):
        self.current = NavigationState.overview()
        self.history.clear()

    def breadcrumbs(self):
        return self.history + [self.current]

    @property
    def depth(self):
        return len(self.history)
