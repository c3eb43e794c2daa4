""" All Error and Success Message declare here... """


# SUCCESS MESSAGES
SUCCESS = {
    "BOT_CREATE_SUCCESS"            :   "Bot created successfully.",
    "BOT_FLOW_UPDATE_SUCCESS"       :   "Conversation flow updated successfully.",
    "BOT_DELETE_SUCCESS"            :   "Bot and its sessions deleted successfully.",
    "CUSTOMISATION_SAVE_SUCCESS"    :   "Customisation saved successfully.",
}


# ERROR MESSAGES
ERROR = {
    # Request Errors
    "INVALID_REQUEST"               :   "Request body is required",

    # Bot Errors
    "BOT_NOT_FOUND"                 :   "Bot not found",
    "BOT_NAME_REQUIRED"             :   "Bot name is required.",
    "BOT_NAME_MIN"                  :   "Bot name must be at least {} characters.",
    "BOT_CREATE_FAILED"             :   "Unable to create bot. Please try again.",
    "BOT_FLOW_UPDATE_FAILED"        :   "Unable to update conversation flow.",
    "BOT_DELETE_FAILED"             :   "Unable to delete bot.",

    # Customisation Errors
    "CUSTOMISATION_SAVE_FAILED"     :   "Unable to save customisation.",
    "CUSTOMISATION_INVALID_FIELD"   :   "Invalid value for '{}': {}",

    # Flow Definition Errors
    "INVALID_FLOW"                  :   "Conversation flow must contain 'nodes' and 'edges' lists.",
    "INVALID_FLOW_JSON"             :   "Conversation flow is not valid JSON.",
    "FLOW_NODE_ID_REQUIRED"         :   "Every node needs an 'id'.",
    "FLOW_DUPLICATE_NODE_ID"        :   "Duplicate node id: {}",
    "FLOW_EDGE_INCOMPLETE"          :   "Every edge needs a 'source' and a 'target'.",

    # Session Errors
    "SESSION_NOT_FOUND"             :   "Session not found",
    "BOT_FOR_SESSION_NOT_FOUND"     :   "Bot for session not found",
    "CHAT_HISTORY_NOT_FOUND"        :   "Chat history not found",
    "SESSION_NODE_MISSING"          :   "No node to respond to; session ended",
    "SESSION_CONFLICT"              :   "Session was updated by another request. Please retry.",
    "SESSION_SAVE_FAILED"           :   "Unable to save flow session.",

    # Respond Errors
    "INPUT_REQUIRED"                :   "Please provide input for this node.",
    "BRANCH_SELECTION_REQUIRED"     :   "Please provide option_index_or_label (index or label) to select branch option.",
    "BRANCH_OPTION_NOT_RECOGNIZED"  :   "Branch option not recognized",
}
